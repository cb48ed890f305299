from enum import Enum
from pathlib import PurePath
from typing import List, NoReturn, Optional, Union

from cardreader.errors import CardReaderError


def assert_unreachable(value: NoReturn) -> NoReturn:
    """Closes a dispatch over MediaType; reaching it means a branch is missing."""
    raise AssertionError(f"Statement should be unreachable: {value!r}")


class MediaType(str, Enum):
    """Declared content types a character card can arrive as."""
    JSON = "application/json"
    PNG = "image/png"
    WEBP = "image/webp"

    @property
    def extension(self) -> str:
        return "." + self.value.split("/")[1]

    @classmethod
    def from_declared(cls, value: Union[str, "MediaType", None]) -> "MediaType":
        """Resolve a declared media type, rejecting anything unsupported."""
        if isinstance(value, cls):
            return value
        if not value:
            raise CardReaderError.unsupported_media_type(value)

        # Drop parameters such as "; charset=utf-8"
        normalized = str(value).split(";", 1)[0].strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise CardReaderError.unsupported_media_type(value)

    @classmethod
    def from_filename(cls, filename: Union[str, PurePath]) -> "MediaType":
        suffix = PurePath(filename).suffix.lower()
        for member in cls:
            if member.extension == suffix:
                return member
        raise CardReaderError.unsupported_media_type(suffix or str(filename))


VALID_FILE_EXTENSIONS: List[str] = [member.extension for member in MediaType]

INPUT_ACCEPT = ", ".join(VALID_FILE_EXTENSIONS)
