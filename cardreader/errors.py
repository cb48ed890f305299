from enum import Enum
from typing import Optional

class ErrorType(Enum):
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"
    INVALID_FORMAT = "INVALID_FORMAT"
    METADATA_ERROR = "METADATA_ERROR"
    MALFORMED_PAYLOAD = "MALFORMED_PAYLOAD"

class ErrorMessages:
    FILE_NOT_FOUND = "File not found: {path}"
    UNSUPPORTED_MEDIA_TYPE = "Unsupported media type: {media_type}"
    NO_METADATA = "No character data found!"
    NO_METADATA_IN = "No character data found in {source}"
    INVALID_FORMAT = "Invalid {format} container: {error}"
    MALFORMED_PAYLOAD = "Malformed character payload in {source}: {error}"

class CardReaderError(Exception):
    def __init__(self, message: str, error_type: ErrorType):
        self.message = message
        self.error_type = error_type
        super().__init__(self.message)

    @classmethod
    def file_not_found(cls, path: str) -> "CardReaderError":
        return CardFileNotFound(ErrorMessages.FILE_NOT_FOUND.format(path=path), ErrorType.FILE_NOT_FOUND)

    @classmethod
    def unsupported_media_type(cls, media_type: Optional[str]) -> "CardReaderError":
        return UnsupportedMediaType(
            ErrorMessages.UNSUPPORTED_MEDIA_TYPE.format(media_type=media_type),
            ErrorType.UNSUPPORTED_MEDIA_TYPE
        )

    @classmethod
    def no_metadata(cls, source: Optional[str] = None) -> "CardReaderError":
        if source:
            message = ErrorMessages.NO_METADATA_IN.format(source=source)
        else:
            message = ErrorMessages.NO_METADATA
        return NoMetadataFound(message, ErrorType.METADATA_ERROR)

    @classmethod
    def invalid_format(cls, format: str, error: str) -> "CardReaderError":
        return InvalidContainer(
            ErrorMessages.INVALID_FORMAT.format(format=format, error=error),
            ErrorType.INVALID_FORMAT
        )

    @classmethod
    def malformed_payload(cls, source: str, error: str) -> "CardReaderError":
        return MalformedPayload(
            ErrorMessages.MALFORMED_PAYLOAD.format(source=source, error=error),
            ErrorType.MALFORMED_PAYLOAD
        )

class UnsupportedMediaType(CardReaderError):
    """Declared media type is not one of the supported card formats."""

class NoMetadataFound(CardReaderError):
    """The container parsed but carries no character payload."""

class MalformedPayload(CardReaderError):
    """A payload was located but could not be decoded."""

class InvalidContainer(CardReaderError):
    """The PNG/WebP byte stream itself is corrupt."""

class CardFileNotFound(CardReaderError):
    pass
