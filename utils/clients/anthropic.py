"""
Anthropic API client utilities for the CRO auditor.

This module contains functions for interacting with the Anthropic Claude API
with automatic retry logic for transient failures.
"""

from typing import Optional

import anthropic
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from config import settings

# Lazy initialization of Anthropic client
_anthropic_client = None


def get_anthropic_client():
    """Get or create the Anthropic client instance."""
    global _anthropic_client
    if _anthropic_client is None:
        _anthropic_client = anthropic.Anthropic(api_key=settings.ANTHROPIC_API_KEY)
    return _anthropic_client


def build_message_content(prompt: str, screenshot: Optional[str] = None) -> list:
    """Screenshot block first (when present), then the text prompt."""
    content = []
    if screenshot:
        content.append({
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": "image/jpeg",
                "data": screenshot,
            },
        })
    content.append({"type": "text", "text": prompt})
    return content


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(
        (anthropic.APIConnectionError, anthropic.RateLimitError)
    ),
    reraise=True,
)
def call_anthropic_api_with_retry(prompt: str, screenshot: Optional[str] = None):
    """
    Calls Anthropic API with automatic retry logic for transient failures.

    Retries up to 3 times for:
    - APIConnectionError (network issues)
    - RateLimitError (rate limit exceeded)

    Does NOT retry for:
    - AuthenticationError (bad API key)
    - BadRequestError (malformed request)
    - Other permanent errors

    Args:
        prompt: The CRO audit prompt with the extracted page facts
        screenshot: Base64-encoded above-the-fold JPEG (optional)

    Returns:
        Anthropic message response
    """
    client = get_anthropic_client()
    return client.messages.create(
        model=settings.ANTHROPIC_MODEL,
        max_tokens=settings.MAX_TOKENS,
        messages=[
            {
                "role": "user",
                "content": build_message_content(prompt, screenshot),
            }
        ],
    )
