"""
Tests for payload_decoder.py

Covers:
- decode_json() strict parsing, no envelope unwrapping
- decode_png() base64 + JSON, spec_version 2.0 envelope, padding repair
- decode_webp() fallback order: description, value text, value byte list
"""
import base64
import json

import pytest

from conftest import byte_list, encode_chara
from cardreader.errors import MalformedPayload, NoMetadataFound
from cardreader.exif_reader import ExifTag
from cardreader.payload_decoder import DecodeAttempt, PayloadDecoder


@pytest.fixture
def decoder(mock_logger):
    return PayloadDecoder(mock_logger)


class TestDecodeJson:

    def test_identity(self, decoder, v1_metadata):
        metadata = decoder.decode_json(json.dumps(v1_metadata))

        assert metadata.to_dict() == v1_metadata

    def test_envelope_is_not_unwrapped(self, decoder, v2_card):
        metadata = decoder.decode_json(json.dumps(v2_card))

        assert metadata.name == "Outer Name"
        assert metadata.to_dict()["data"] == v2_card["data"]

    def test_invalid_json(self, decoder):
        with pytest.raises(MalformedPayload):
            decoder.decode_json("{name: 'not strict json'}")

    def test_non_object(self, decoder):
        with pytest.raises(MalformedPayload):
            decoder.decode_json("[1, 2, 3]")


class TestDecodePng:

    def test_flat_card(self, decoder, v1_metadata):
        metadata = decoder.decode_png(encode_chara(v1_metadata))

        assert metadata.to_dict() == v1_metadata

    def test_v2_envelope_unwrapped(self, decoder, v2_card):
        metadata = decoder.decode_png(encode_chara(v2_card))

        assert metadata.to_dict() == v2_card["data"]
        assert metadata.name == "Test Character"

    def test_other_spec_version_not_unwrapped(self, decoder, v2_card):
        v2_card["spec_version"] = "3.0"

        metadata = decoder.decode_png(encode_chara(v2_card))

        assert metadata.name == "Outer Name"
        assert metadata.to_dict()["spec_version"] == "3.0"

    def test_missing_padding(self, decoder):
        encoded = encode_chara({"name": "Pad"}).rstrip("=")

        assert decoder.decode_png(encoded).name == "Pad"

    def test_utf8_content(self, decoder):
        metadata = decoder.decode_png(encode_chara({"name": "Zoë", "description": "日本語"}))

        assert metadata.name == "Zoë"
        assert metadata.description == "日本語"

    def test_bad_base64(self, decoder):
        with pytest.raises(MalformedPayload):
            decoder.decode_png("abc")

    def test_invalid_utf8(self, decoder):
        encoded = base64.b64encode(b"\xff\xfe{}").decode("ascii")

        with pytest.raises(MalformedPayload, match="UTF-8"):
            decoder.decode_png(encoded)

    def test_invalid_json(self, decoder):
        encoded = base64.b64encode(b"{not json").decode("ascii")

        with pytest.raises(MalformedPayload):
            decoder.decode_png(encoded)

    def test_envelope_without_data_object(self, decoder):
        with pytest.raises(MalformedPayload):
            decoder.decode_png(encode_chara({"spec_version": "2.0", "data": "nope"}))


class TestDecodeWebp:

    def test_description_path(self, decoder):
        tag = ExifTag([65, 83], '{name: "Desc", tags: ["a",],}')

        assert decoder.decode_webp(tag).name == "Desc"

    def test_description_parse_failure_is_malformed(self, decoder):
        tag = ExifTag(['{"name": "ignored"}'], "{broken")

        with pytest.raises(MalformedPayload):
            decoder.decode_webp(tag)

    def test_undefined_description_uses_value(self, decoder):
        tag = ExifTag(["{name: 'Value', first_mes: 'Hi',}"], "Undefined")

        metadata = decoder.decode_webp(tag)

        assert metadata.name == "Value"
        assert metadata.first_mes == "Hi"

    def test_missing_description_uses_value(self, decoder):
        tag = ExifTag(['{"name": "NoDesc"}'], "")

        assert decoder.decode_webp(tag).name == "NoDesc"

    def test_byte_list_fallback(self, decoder):
        tag = ExifTag([byte_list('{"name": "Bytes", "description": "Café"}')], "Undefined")

        metadata = decoder.decode_webp(tag)

        assert metadata.name == "Bytes"
        assert metadata.description == "Café"

    def test_byte_list_with_bom(self, decoder):
        tag = ExifTag([byte_list('{"name": "Bommed"}', bom=True)], "Undefined")

        assert decoder.decode_webp(tag).name == "Bommed"

    def test_text_parse_wins_over_byte_list(self, decoder):
        tag = ExifTag(['{"name": "Text"}'], "Undefined")
        calls = []
        decoder.webp_strategies[2] = ("value_byte_list", lambda tag: calls.append(tag))

        metadata = decoder.decode_webp(tag)

        assert metadata.name == "Text"
        assert calls == []

    def test_strategy_order(self, decoder):
        assert [name for name, _ in decoder.webp_strategies] == ["description", "value_text", "value_byte_list"]

    def test_inapplicable_reason_is_logged(self, decoder, mock_logger):
        with pytest.raises(NoMetadataFound):
            decoder.decode_webp(ExifTag(["definitely not json"], "Undefined"))

        messages = [call.args[0] for call in mock_logger.log_step.call_args_list]
        assert any(message.startswith("WebP strategy value_text not applicable: not JSON5 text") for message in messages)
        assert any("decimal byte values" in message for message in messages)

    @pytest.mark.parametrize("value", ["123,34,1_0,125", "+123,34", "123,-34", "１２３,34", "123,,34"])
    def test_byte_list_parts_must_be_decimal(self, decoder, value):
        with pytest.raises(NoMetadataFound):
            decoder.decode_webp(ExifTag([value], "Undefined"))

    def test_byte_list_allows_spaces(self, decoder):
        spaced = ", ".join(str(b) for b in b'{"name": "Spaced"}')

        assert decoder.decode_webp(ExifTag([spaced], "Undefined")).name == "Spaced"

    def test_byte_list_out_of_range(self, decoder):
        tag = ExifTag(["123,34,300,34,125"], "Undefined")

        with pytest.raises(MalformedPayload, match="byte range"):
            decoder.decode_webp(tag)

    def test_value_not_byte_list(self, decoder):
        tag = ExifTag(["definitely not json"], "Undefined")

        with pytest.raises(NoMetadataFound):
            decoder.decode_webp(tag)

    def test_byte_list_not_json(self, decoder):
        tag = ExifTag([byte_list("plain words")], "Undefined")

        with pytest.raises(NoMetadataFound):
            decoder.decode_webp(tag)

    @pytest.mark.parametrize("value", [[], ['{"a": 1}', '{"b": 2}'], [""], [123]])
    def test_unusable_value(self, decoder, value):
        with pytest.raises(NoMetadataFound):
            decoder.decode_webp(ExifTag(value, "Undefined"))

    def test_strategy_results(self, decoder):
        assert decoder._from_description(ExifTag([], "Undefined")) == DecodeAttempt(False)
        assert decoder._from_value_text(ExifTag(["a", "b"], "Undefined")).applicable is False
