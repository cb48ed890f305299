"""EXIF tag reading for WebP character cards."""
from io import BytesIO
from typing import Any, Dict, List, NamedTuple

from PIL import ExifTags, Image, UnidentifiedImageError
from piexif.helper import UserComment

from cardreader.errors import CardReaderError
from cardreader.utils.constants import EXIF_UNDEFINED, USER_COMMENT_TAG

EXIF_IFD_POINTER = 0x8769
ASCII_PREFIX = b"ASCII\x00\x00\x00"


class ExifTag(NamedTuple):
    """A tag as embedding tools see it: the raw value list plus a readable description."""
    value: List[Any]
    description: str


def _restore_text(text: str) -> str:
    # Pillow reads ASCII tags as latin-1; writers often put UTF-8 there
    try:
        return text.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return text


def _describe_user_comment(raw: bytes) -> str:
    # First eight bytes declare the character code
    if raw.startswith(ASCII_PREFIX):
        # Embedding tools write UTF-8 behind the ASCII marker
        return raw[len(ASCII_PREFIX):].decode("utf-8", errors="replace").rstrip("\x00")
    try:
        return UserComment.load(raw)
    except ValueError:
        return EXIF_UNDEFINED


def to_exif_tag(name: str, raw: Any) -> ExifTag:
    if isinstance(raw, str):
        values = [_restore_text(part) for part in raw.split("\x00") if part]
        return ExifTag(values, EXIF_UNDEFINED)

    if isinstance(raw, bytes):
        if name == USER_COMMENT_TAG:
            description = _describe_user_comment(raw)
        else:
            description = f"[{len(raw)} bytes]"
        return ExifTag(list(raw), description)

    if isinstance(raw, tuple):
        return ExifTag(list(raw), ", ".join(str(item) for item in raw))

    return ExifTag([raw], str(raw))


def read_exif_tags(data: bytes, logger=None) -> Dict[str, ExifTag]:
    """Read base and Exif sub-IFD tags from an image, keyed by tag name."""
    try:
        with Image.open(BytesIO(data)) as image:
            exif = image.getexif()
            entries = dict(exif.items())
            if EXIF_IFD_POINTER in exif:
                entries.update(exif.get_ifd(EXIF_IFD_POINTER))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise CardReaderError.invalid_format("WebP", str(e)) from e

    tags = {}
    for tag_id, raw in entries.items():
        if tag_id == EXIF_IFD_POINTER:
            continue
        name = ExifTags.TAGS.get(tag_id, f"Unknown({tag_id})")
        tags[name] = to_exif_tag(name, raw)

    if logger:
        logger.log_step(f"EXIF tags found: {sorted(tags.keys())}")
    return tags
