import base64
from typing import Iterable

from cardreader.models.media_type import MediaType, assert_unreachable
from cardreader.payload_locator import LocatedPayload
from cardreader.png_chunks import PngChunk, encode_chunks


def to_data_uri(data: bytes, media_type: MediaType) -> str:
    return f"data:{media_type.value};base64,{base64.b64encode(data).decode('ascii')}"


def materialize_png(chunks: Iterable[PngChunk]) -> str:
    """Re-encode the image chunks left after removing text chunks."""
    return to_data_uri(encode_chunks(chunks), MediaType.PNG)


def materialize_webp(data: bytes) -> str:
    return to_data_uri(data, MediaType.WEBP)


def materialize_fallback_avatar(located: LocatedPayload) -> str:
    """Fallback avatar for a located payload; JSON cards have none."""
    media_type = located.media_type
    if media_type is MediaType.JSON:
        return ""
    elif media_type is MediaType.PNG:
        return materialize_png(located.residual_chunks or [])
    elif media_type is MediaType.WEBP:
        return materialize_webp(located.residual_bytes or b"")
    else:
        assert_unreachable(media_type)
