"""
Entry points for reading a character card out of a JSON, PNG or WebP file.

Extraction is a pure transform of the file bytes: the only I/O is the single
read of the input, and every failure propagates to the caller unchanged.
"""
from pathlib import Path
from typing import Optional, Union

from cardreader.avatar_materializer import materialize_fallback_avatar
from cardreader.errors import CardReaderError
from cardreader.models.character_data import Character
from cardreader.models.media_type import MediaType, assert_unreachable
from cardreader.payload_decoder import PayloadDecoder
from cardreader.payload_locator import LocatedPayload, PayloadLocator


class CharacterExtractor:
    def __init__(self, logger):
        self.logger = logger
        self.locator = PayloadLocator(logger)
        self.decoder = PayloadDecoder(logger)

    def extract(self, data: bytes, media_type: Union[str, MediaType, None]) -> Character:
        """Build a Character from raw file bytes and their declared media type."""
        media_type = MediaType.from_declared(media_type)
        self.logger.log_step(f"Extracting character from {len(data)} bytes of {media_type.value}")

        try:
            located = self.locator.locate(data, media_type)
            metadata = self._decode(located)
        except CardReaderError as e:
            self.logger.log_error(f"{e.error_type.value}: {e.message}")
            raise

        fallback_avatar = materialize_fallback_avatar(located)
        character = Character(metadata=metadata, fallback_avatar=fallback_avatar)
        self.logger.log_step(f"Loaded character '{character.name}'")
        return character

    def _decode(self, located: LocatedPayload):
        media_type = located.media_type
        if media_type is MediaType.JSON:
            return self.decoder.decode_json(located.payload)
        elif media_type is MediaType.PNG:
            return self.decoder.decode_png(located.payload)
        elif media_type is MediaType.WEBP:
            return self.decoder.decode_webp(located.payload)
        else:
            assert_unreachable(media_type)

    async def extract_upload(self, file) -> Character:
        """Extract from an uploaded file (anything with ``content_type`` and async ``read()``)."""
        media_type = MediaType.from_declared(getattr(file, "content_type", None))
        data = await file.read()
        return self.extract(data, media_type)

    def extract_path(self, path: Union[str, Path], media_type: Optional[Union[str, MediaType]] = None) -> Character:
        """Extract from a file on disk, inferring the media type from its extension."""
        path = Path(path)
        if media_type is None:
            media_type = MediaType.from_filename(path)
        else:
            media_type = MediaType.from_declared(media_type)

        if not path.is_file():
            raise CardReaderError.file_not_found(str(path))

        return self.extract(path.read_bytes(), media_type)
