import base64
import io

from PIL import Image, UnidentifiedImageError
from loguru import logger

from hestia.core.errors import ValidationError
from hestia.core.sharing_config import PROFILE_PIC_SIZE, PROFILE_PIC_FORMAT


def encode_picture(data: bytes | None) -> str | None:
    return base64.b64encode(data).decode("ascii") if data else None


def resize_profile_picture(data: bytes) -> bytes:
    """
    Normalize an uploaded picture to a fixed-size PNG.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img = img.convert("RGBA").resize(PROFILE_PIC_SIZE)
            out = io.BytesIO()
            img.save(out, format=PROFILE_PIC_FORMAT)
    except (UnidentifiedImageError, OSError):
        raise ValidationError("Uploaded file is not a valid image")

    logger.debug(f"Resized profile picture | in={len(data)}B out={out.tell()}B")
    return out.getvalue()
