import base64
import binascii
import logging
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from clipsync.models import ClipboardItem

logger = logging.getLogger(__name__)


def encode_image(path: Union[str, Path]) -> str:
    """Read an image file and return it as a ``data:<mime>;base64,`` URI."""
    path = Path(path)
    try:
        with Image.open(path) as image:
            mime = image.get_format_mimetype() or f"image/{(image.format or 'png').lower()}"
    except UnidentifiedImageError as e:
        raise ValueError(f"Not a recognised image: {path}") from e

    payload = base64.b64encode(path.read_bytes()).decode("ascii")
    logger.info(f"Encoded image {path.name} ({mime})")
    return f"data:{mime};base64,{payload}"


def describe(item: ClipboardItem, width: int = 60) -> str:
    if item.is_image:
        header, _, payload = item.value.partition(",")
        mime = header[len("data:"):].split(";", 1)[0]
        try:
            size = len(base64.b64decode(payload)) if ";base64" in header else len(payload)
        except binascii.Error:
            size = len(payload)
        return f"[image {mime}, {size} bytes]"
    text = item.value.replace("\n", " ")
    return text if len(text) <= width else text[: width - 3] + "..."
