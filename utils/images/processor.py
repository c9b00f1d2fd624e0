"""
Image processing utilities for CRO Auditor.

Screenshots are attached to audit responses and to the AI prompt, so they
are bounded in both dimensions and file size.
"""

import base64
import io

from PIL import Image

from config import settings


def resize_screenshot_if_needed(
    screenshot_bytes: bytes,
    max_dimension: int = settings.MAX_SCREENSHOT_DIMENSION,
    max_file_size: int = 5_242_880,
) -> str:
    """
    Resize and compress a screenshot and return it base64-encoded as JPEG.

    Args:
        screenshot_bytes: Original screenshot bytes
        max_dimension: Maximum width/height in pixels
        max_file_size: Maximum file size in bytes (default 5MB)

    Returns:
        Base64-encoded JPEG
    """
    image = Image.open(io.BytesIO(screenshot_bytes))
    width, height = image.size

    if width > max_dimension or height > max_dimension:
        if width > height:
            new_width = max_dimension
            new_height = int(height * (max_dimension / width))
        else:
            new_height = max_dimension
            new_width = int(width * (max_dimension / height))
        image = image.resize((new_width, new_height), Image.Resampling.LANCZOS)

    # JPEG has no alpha channel
    if image.mode == "RGBA":
        rgb_image = Image.new("RGB", image.size, (255, 255, 255))
        rgb_image.paste(image, mask=image.split()[3])
        image = rgb_image
    elif image.mode != "RGB":
        image = image.convert("RGB")

    quality = 90
    buffer = io.BytesIO()
    while quality > 20:
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=quality, optimize=True)
        if buffer.tell() <= max_file_size:
            break
        quality -= 10

    scale_factor = 0.8
    while buffer.tell() > max_file_size and scale_factor > 0.3:
        resized = image.resize(
            (int(image.width * scale_factor), int(image.height * scale_factor)),
            Image.Resampling.LANCZOS,
        )
        buffer = io.BytesIO()
        resized.save(buffer, format="JPEG", quality=75, optimize=True)
        scale_factor -= 0.1

    return base64.b64encode(buffer.getvalue()).decode("utf-8")
