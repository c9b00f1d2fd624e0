import json
import logging
import re

import demjson3
import json5

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def strip_code_fences(response_text: str) -> str:
    """Remove a surrounding markdown code block and any prose around the JSON object."""
    text = _CODE_FENCE.sub("", response_text.strip())
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        text = text[start : end + 1]
    return text


def repair_and_parse_json(response_text: str) -> dict:
    """
    Multi-layered JSON parsing with auto-repair capabilities.

    Attempts to parse JSON through multiple strategies:
    1. Standard json.loads()
    2. Clean common issues (trailing commas, comments)
    3. json5 parser (tolerates comments and trailing commas)
    4. demjson3 parser (auto-repairs many errors)

    Args:
        response_text: Raw text response from Claude

    Returns:
        Parsed dictionary

    Raises:
        ValueError: If all parsing attempts fail or the payload is not an object
    """
    text = strip_code_fences(response_text)
    errors = []

    def _object(result) -> dict:
        if not isinstance(result, dict):
            raise ValueError(f"Expected a JSON object, got {type(result).__name__}")
        return result

    # Layer 1: standard parser
    try:
        return _object(json.loads(text))
    except json.JSONDecodeError as e:
        errors.append(f"Standard JSON: {str(e)}")
        logger.debug(f"❌ Layer 1 failed: {str(e)}")

    # Layer 2: clean common model mistakes
    try:
        cleaned = re.sub(r",(\s*[}\]])", r"\1", text)
        cleaned = re.sub(r"^\s*//.*?$", "", cleaned, flags=re.MULTILINE)
        cleaned = re.sub(r"/\*.*?\*/", "", cleaned, flags=re.DOTALL)
        result = _object(json.loads(cleaned))
        logger.info("✅ Layer 2: Cleaned JSON parsing succeeded")
        return result
    except json.JSONDecodeError as e:
        errors.append(f"Cleaned JSON: {str(e)}")
        logger.debug(f"❌ Layer 2 failed: {str(e)}")

    # Layer 3: json5
    try:
        result = _object(json5.loads(text))
        logger.info("✅ Layer 3: JSON5 parsing succeeded")
        return result
    except Exception as e:
        errors.append(f"JSON5: {str(e)}")
        logger.debug(f"❌ Layer 3 failed: {str(e)}")

    # Layer 4: demjson3
    try:
        result = _object(demjson3.decode(text))
        logger.info("✅ Layer 4: DemJSON parsing succeeded")
        return result
    except Exception as e:
        errors.append(f"DemJSON: {str(e)}")
        logger.debug(f"❌ Layer 4 failed: {str(e)}")

    logger.error(f"❌ JSON parsing failed. Response preview: {response_text[:200]}...")
    raise ValueError(f"Failed to parse JSON after all attempts. Errors: {'; '.join(errors[:2])}")
