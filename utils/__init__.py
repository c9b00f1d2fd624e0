# Utils package - Utility modules organized by domain
# Import from subpackages for convenience

from .clients.anthropic import call_anthropic_api_with_retry
from .parsing.json import repair_and_parse_json
from .images.processor import resize_screenshot_if_needed

__all__ = [
    "call_anthropic_api_with_retry",
    "repair_and_parse_json",
    "resize_screenshot_if_needed",
]
