import base64
import binascii
import json
import re
from typing import Any, Callable, List, NamedTuple, Optional, Tuple

import json5
from pydantic import ValidationError

from cardreader.errors import CardReaderError
from cardreader.exif_reader import ExifTag
from cardreader.models.character_data import CharacterCard, CharacterMetadata
from cardreader.utils.constants import EXIF_UNDEFINED

BYTE_VALUE = re.compile(r"\s*[0-9]+\s*")


class DecodeAttempt(NamedTuple):
    """Outcome of one decode strategy.

    ``applicable`` is False when the payload is not in the strategy's
    encoding; the next strategy is then tried. ``error`` says why, when the
    strategy got far enough to know.
    """
    applicable: bool
    metadata: Optional[CharacterMetadata] = None
    error: Optional[str] = None


NOT_APPLICABLE = DecodeAttempt(False)


class PayloadDecoder:
    """Turns a located payload into CharacterMetadata."""

    def __init__(self, logger):
        self.logger = logger
        # Order matters: a value parsed as text is never re-read as a byte list
        self.webp_strategies: List[Tuple[str, Callable[[ExifTag], DecodeAttempt]]] = [
            ("description", self._from_description),
            ("value_text", self._from_value_text),
            ("value_byte_list", self._from_value_byte_list),
        ]

    def _to_metadata(self, parsed: Any, source: str) -> CharacterMetadata:
        if not isinstance(parsed, dict):
            raise CardReaderError.malformed_payload(source, f"expected a JSON object, got {type(parsed).__name__}")
        return CharacterMetadata.from_payload(parsed)

    def decode_json(self, text: str) -> CharacterMetadata:
        """Parse a standalone JSON card. No envelope unwrapping."""
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            raise CardReaderError.malformed_payload("JSON document", str(e)) from e
        self.logger.log_step("Parsed JSON document")
        return self._to_metadata(parsed, "JSON document")

    def decode_png(self, encoded: str) -> CharacterMetadata:
        """Decode base64 UTF-8 JSON from a PNG 'chara' chunk."""
        encoded = encoded.strip().strip("\x00")

        # Some writers drop the '=' padding
        padding_needed = len(encoded) % 4
        if padding_needed:
            encoded += "=" * (4 - padding_needed)
            self.logger.log_step(f"Added {4 - padding_needed} padding characters")

        try:
            raw = base64.b64decode(encoded)
        except (binascii.Error, ValueError) as e:
            raise CardReaderError.malformed_payload("PNG chara chunk", f"bad base64: {e}") from e

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CardReaderError.malformed_payload("PNG chara chunk", f"invalid UTF-8: {e}") from e

        try:
            card = json.loads(text)
        except json.JSONDecodeError as e:
            raise CardReaderError.malformed_payload("PNG chara chunk", str(e)) from e

        if isinstance(card, dict) and CharacterCard.is_envelope(card):
            self.logger.log_step(f"Unwrapping spec_version {card['spec_version']} envelope")
            try:
                card = CharacterCard.unwrap(card)
            except ValidationError as e:
                raise CardReaderError.malformed_payload("PNG chara chunk", f"bad envelope: {e}") from e

        return self._to_metadata(card, "PNG chara chunk")

    def decode_webp(self, tag: ExifTag) -> CharacterMetadata:
        """Try each WebP UserComment encoding in turn."""
        for name, strategy in self.webp_strategies:
            attempt = strategy(tag)
            if attempt.applicable:
                self.logger.log_step(f"Decoded WebP UserComment via {name}")
                return attempt.metadata
            if attempt.error:
                self.logger.log_step(f"WebP strategy {name} not applicable: {attempt.error}")
            else:
                self.logger.log_step(f"WebP strategy {name} not applicable")

        raise CardReaderError.no_metadata("WebP UserComment")

    def _from_description(self, tag: ExifTag) -> DecodeAttempt:
        description = tag.description
        if not description or description == EXIF_UNDEFINED:
            return NOT_APPLICABLE
        try:
            parsed = json5.loads(description)
        except ValueError as e:
            raise CardReaderError.malformed_payload("WebP UserComment description", str(e)) from e
        return DecodeAttempt(True, self._to_metadata(parsed, "WebP UserComment description"))

    @staticmethod
    def _single_text_value(tag: ExifTag) -> Optional[str]:
        if not tag.value or len(tag.value) != 1:
            return None
        data = tag.value[0]
        if not isinstance(data, str) or not data:
            return None
        return data

    def _from_value_text(self, tag: ExifTag) -> DecodeAttempt:
        data = self._single_text_value(tag)
        if data is None:
            return NOT_APPLICABLE
        try:
            parsed = json5.loads(data)
        except ValueError as e:
            return DecodeAttempt(False, error=f"not JSON5 text ({e})")
        return DecodeAttempt(True, self._to_metadata(parsed, "WebP UserComment value"))

    def _from_value_byte_list(self, tag: ExifTag) -> DecodeAttempt:
        # Only reached when the same single string failed to parse as text
        data = self._single_text_value(tag)
        if data is None:
            return NOT_APPLICABLE

        parts = data.split(",")
        if not all(BYTE_VALUE.fullmatch(part) for part in parts):
            return DecodeAttempt(False, error="not a comma-separated list of decimal byte values")
        byte_values = [int(part) for part in parts]

        out_of_range = [value for value in byte_values if value > 255]
        if out_of_range:
            raise CardReaderError.malformed_payload(
                "WebP UserComment byte list", f"values out of byte range: {out_of_range[:5]}"
            )

        text = bytes(byte_values).decode("utf-8-sig", errors="replace")
        try:
            parsed = json5.loads(text)
        except ValueError as e:
            return DecodeAttempt(False, error=str(e))
        return DecodeAttempt(True, self._to_metadata(parsed, "WebP UserComment byte list"))
