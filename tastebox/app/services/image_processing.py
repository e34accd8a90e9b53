import logging
from io import BytesIO
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from tastebox.app.core.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE = (800, 600)
JPEG_QUALITY = 85


def extension_for(content_type: str) -> str:
    if "png" in content_type:
        return "png"
    if "webp" in content_type:
        return "webp"
    return "jpg"


def resize_to_fit(
    data: bytes, content_type: str = "image/jpeg", max_size: Tuple[int, int] = MAX_IMAGE_SIZE
) -> Tuple[bytes, str]:
    """Downscale an image to fit inside ``max_size``, keeping aspect ratio.

    PNG and WebP keep their format (and transparency); everything else is
    re-encoded as progressive JPEG. Small images are never enlarged. Returns the
    encoded bytes and their content type. Raises ``ValidationError`` when the
    bytes are not an image Pillow can decode.
    """
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("Unrecognized image file") from exc

    img.thumbnail(max_size, Image.LANCZOS)
    extension = extension_for(content_type.lower())
    out = BytesIO()
    if extension == "png":
        if img.mode == "CMYK":
            img = img.convert("RGB")
        img.save(out, format="PNG", optimize=True)
        return out.getvalue(), "image/png"
    if extension == "webp":
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA")
        img.save(out, format="WEBP", quality=JPEG_QUALITY)
        return out.getvalue(), "image/webp"

    if img.mode != "RGB":
        img = img.convert("RGB")
    img.save(out, format="JPEG", quality=JPEG_QUALITY, progressive=True)
    return out.getvalue(), "image/jpeg"
