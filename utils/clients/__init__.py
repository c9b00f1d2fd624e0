# Clients subpackage - External API clients
from .anthropic import build_message_content, call_anthropic_api_with_retry, get_anthropic_client

__all__ = [
    "build_message_content",
    "call_anthropic_api_with_retry",
    "get_anthropic_client",
]
