"""PNG chunk splitting, re-encoding and text chunk decoding."""
import struct
import zlib
from typing import Iterable, List, NamedTuple

from cardreader.errors import CardReaderError
from cardreader.utils.constants import PNG_SIGNATURE


class PngChunk(NamedTuple):
    name: str
    data: bytes


class TextChunk(NamedTuple):
    keyword: str
    text: str


def _invalid(error: str) -> CardReaderError:
    return CardReaderError.invalid_format("PNG", error)


def extract_chunks(data: bytes) -> List[PngChunk]:
    """Split a PNG byte stream into its chunks, in file order."""
    if not data.startswith(PNG_SIGNATURE):
        raise _invalid("missing PNG signature")

    chunks = []
    offset = len(PNG_SIGNATURE)
    ended = False
    while not ended:
        if offset + 8 > len(data):
            raise _invalid("unexpected end of data before IEND")

        length, ctype = struct.unpack(">I4s", data[offset:offset + 8])
        start = offset + 8
        end = start + length
        if end + 4 > len(data):
            raise _invalid(f"chunk {ctype!r} is truncated")

        chunk_data = data[start:end]
        (crc,) = struct.unpack(">I", data[end:end + 4])
        if zlib.crc32(ctype + chunk_data) & 0xFFFFFFFF != crc:
            raise _invalid(f"CRC mismatch in chunk {ctype!r}")

        name = ctype.decode("latin-1")
        if not chunks and name != "IHDR":
            raise _invalid("IHDR must be the first chunk")

        chunks.append(PngChunk(name, chunk_data))
        offset = end + 4
        ended = name == "IEND"

    return chunks


def encode_chunks(chunks: Iterable[PngChunk]) -> bytes:
    """Reassemble chunks into a PNG byte stream with fresh lengths and CRCs."""
    parts = [PNG_SIGNATURE]
    for chunk in chunks:
        ctype = chunk.name.encode("latin-1")
        parts.append(struct.pack(">I", len(chunk.data)))
        parts.append(ctype)
        parts.append(chunk.data)
        parts.append(struct.pack(">I", zlib.crc32(ctype + chunk.data) & 0xFFFFFFFF))
    return b"".join(parts)


def encode_text_chunk(keyword: str, text: str) -> PngChunk:
    """Build a tEXt chunk. Used to construct fixtures and debug output."""
    return PngChunk("tEXt", keyword.encode("latin-1") + b"\x00" + text.encode("latin-1"))


def text_chunk_keyword(chunk: PngChunk) -> str:
    """Keyword of a text chunk, read without decoding its text."""
    return chunk.data.partition(b"\x00")[0].decode("latin-1")


def decode_text_chunk(chunk: PngChunk) -> TextChunk:
    """Decode a tEXt, zTXt or iTXt chunk into its keyword and text."""
    keyword, sep, rest = chunk.data.partition(b"\x00")
    if not sep:
        raise _invalid(f"{chunk.name} chunk has no keyword separator")

    try:
        if chunk.name == "tEXt":
            return TextChunk(keyword.decode("latin-1"), rest.decode("latin-1"))

        if chunk.name == "zTXt":
            # compression method byte, then a zlib stream
            if not rest or rest[0] != 0:
                raise _invalid("unknown zTXt compression method")
            return TextChunk(keyword.decode("latin-1"), zlib.decompress(rest[1:]).decode("latin-1"))

        if chunk.name == "iTXt":
            if len(rest) < 2:
                raise _invalid("iTXt chunk is truncated")
            compressed, method = rest[0], rest[1]
            language, _, rest = rest[2:].partition(b"\x00")
            translated, _, text = rest.partition(b"\x00")
            if compressed:
                if method != 0:
                    raise _invalid("unknown iTXt compression method")
                text = zlib.decompress(text)
            return TextChunk(keyword.decode("latin-1"), text.decode("utf-8"))
    except (zlib.error, UnicodeDecodeError) as e:
        raise _invalid(f"could not decode {chunk.name} chunk: {e}") from e

    raise _invalid(f"{chunk.name} is not a text chunk")
