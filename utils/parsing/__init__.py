# Parsing subpackage - JSON repair for model output
from .json import repair_and_parse_json, strip_code_fences

__all__ = [
    "repair_and_parse_json",
    "strip_code_fences",
]
