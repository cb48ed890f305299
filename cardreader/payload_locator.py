from typing import List, NamedTuple, Optional, Union

from cardreader.errors import CardReaderError
from cardreader.exif_reader import ExifTag, read_exif_tags
from cardreader.models.media_type import MediaType, assert_unreachable
from cardreader.png_chunks import PngChunk, decode_text_chunk, extract_chunks, text_chunk_keyword
from cardreader.utils.constants import CHARA_KEYWORD, PNG_TEXT_CHUNK_TYPES, USER_COMMENT_TAG


class LocatedPayload(NamedTuple):
    media_type: MediaType
    payload: Union[str, ExifTag]
    residual_chunks: Optional[List[PngChunk]] = None
    residual_bytes: Optional[bytes] = None


class PayloadLocator:
    """Finds the embedded character payload for each supported container."""

    def __init__(self, logger):
        self.logger = logger

    def locate(self, data: bytes, media_type: MediaType) -> LocatedPayload:
        if media_type is MediaType.JSON:
            return self.locate_json(data)
        elif media_type is MediaType.PNG:
            return self.locate_png(data)
        elif media_type is MediaType.WEBP:
            return self.locate_webp(data)
        else:
            assert_unreachable(media_type)

    def locate_json(self, data: bytes) -> LocatedPayload:
        try:
            # utf-8-sig drops a leading byte-order mark
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CardReaderError.malformed_payload("JSON document", str(e)) from e
        self.logger.log_step(f"JSON document is the payload ({len(text)} characters)")
        return LocatedPayload(MediaType.JSON, text)

    def locate_png(self, data: bytes) -> LocatedPayload:
        chunks = extract_chunks(data)
        self.logger.log_step(f"PNG chunks: {[chunk.name for chunk in chunks]}")

        payload = None
        for chunk in chunks:
            # Other text chunks are never decoded, so a broken one cannot hide the card
            if chunk.name not in PNG_TEXT_CHUNK_TYPES or text_chunk_keyword(chunk) != CHARA_KEYWORD:
                continue
            self.logger.log_step(f"Found '{CHARA_KEYWORD}' in {chunk.name} chunk")
            payload = decode_text_chunk(chunk).text
            break

        if payload is None:
            self.logger.log_warning(f"No '{CHARA_KEYWORD}' text chunk in PNG")
            raise CardReaderError.no_metadata("PNG")

        residual = [chunk for chunk in chunks if chunk.name not in PNG_TEXT_CHUNK_TYPES]
        return LocatedPayload(MediaType.PNG, payload, residual_chunks=residual)

    def locate_webp(self, data: bytes) -> LocatedPayload:
        tags = read_exif_tags(data, self.logger)
        user_comment = tags.get(USER_COMMENT_TAG)
        if user_comment is None:
            self.logger.log_warning(f"No {USER_COMMENT_TAG} tag in WebP EXIF data")
            raise CardReaderError.no_metadata("WebP")

        self.logger.log_step(f"Found {USER_COMMENT_TAG} with {len(user_comment.value)} value entries")
        return LocatedPayload(MediaType.WEBP, user_comment, residual_bytes=data)
