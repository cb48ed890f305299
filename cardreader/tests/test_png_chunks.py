"""
Tests for png_chunks.py

Covers:
- extract_chunks() ordering, signature and CRC validation
- encode_chunks() lossless round trip
- decode_text_chunk() for tEXt, zTXt and iTXt
"""
import struct
import zlib
from io import BytesIO

import pytest
from PIL import Image

from conftest import make_png
from cardreader.errors import InvalidContainer
from cardreader.png_chunks import (
    PngChunk,
    decode_text_chunk,
    encode_chunks,
    encode_text_chunk,
    extract_chunks,
)


class TestExtractChunks:

    def test_chunk_order(self):
        chunks = extract_chunks(make_png({"chara": "abc"}))
        names = [chunk.name for chunk in chunks]

        assert names[0] == "IHDR"
        assert names[-1] == "IEND"
        assert "tEXt" in names
        assert "IDAT" in names

    def test_round_trip_is_lossless(self):
        data = make_png({"chara": "abc", "Software": "x"})

        assert encode_chunks(extract_chunks(data)) == data

    def test_rejects_non_png(self):
        with pytest.raises(InvalidContainer):
            extract_chunks(b"GIF89a not a png at all")

    def test_rejects_truncated_stream(self):
        data = make_png()

        with pytest.raises(InvalidContainer):
            extract_chunks(data[:-6])

    def test_rejects_bad_crc(self):
        data = bytearray(make_png())
        # Flip a byte inside IHDR data (signature 8 + length 4 + type 4)
        data[17] ^= 0xFF

        with pytest.raises(InvalidContainer, match="CRC"):
            extract_chunks(bytes(data))

    def test_ignores_trailing_bytes_after_iend(self):
        data = make_png()

        chunks = extract_chunks(data + b"garbage")

        assert chunks[-1].name == "IEND"


class TestEncodeChunks:

    def test_residual_chunks_form_valid_image(self):
        data = make_png({"chara": "abc"}, color="blue")
        residual = [chunk for chunk in extract_chunks(data) if chunk.name != "tEXt"]

        with Image.open(BytesIO(encode_chunks(residual))) as img:
            img.load()
            assert img.size == (8, 8)
            assert "chara" not in img.info
            assert img.getpixel((0, 0))[:3] == (0, 0, 255)

    def test_recomputes_crc(self):
        encoded = encode_chunks([PngChunk("IEND", b"")])

        (crc,) = struct.unpack(">I", encoded[-4:])
        assert crc == zlib.crc32(b"IEND") & 0xFFFFFFFF


class TestDecodeTextChunk:

    def test_text(self):
        result = decode_text_chunk(encode_text_chunk("chara", "eyJhIjoxfQ=="))

        assert result.keyword == "chara"
        assert result.text == "eyJhIjoxfQ=="

    def test_ztxt(self):
        chunk = PngChunk("zTXt", b"chara\x00\x00" + zlib.compress(b"payload"))

        assert decode_text_chunk(chunk) == ("chara", "payload")

    def test_itxt_uncompressed(self):
        chunk = PngChunk("iTXt", b"chara\x00\x00\x00en\x00\x00" + "café".encode("utf-8"))

        assert decode_text_chunk(chunk) == ("chara", "café")

    def test_itxt_compressed(self):
        chunk = PngChunk("iTXt", b"chara\x00\x01\x00\x00\x00" + zlib.compress("déjà".encode("utf-8")))

        assert decode_text_chunk(chunk) == ("chara", "déjà")

    def test_missing_separator(self):
        with pytest.raises(InvalidContainer):
            decode_text_chunk(PngChunk("tEXt", b"no separator"))

    def test_corrupt_ztxt(self):
        with pytest.raises(InvalidContainer):
            decode_text_chunk(PngChunk("zTXt", b"chara\x00\x00not zlib"))

    def test_non_text_chunk(self):
        with pytest.raises(InvalidContainer):
            decode_text_chunk(PngChunk("IDAT", b"a\x00b"))
