import base64

import pytest

from app.core.exceptions import ValidationError
from app.models.biometric.fingerprint import MAX_TEMPLATE_BYTES
from app.models.shared.enums import TemplateFormat
from app.utils.validators.validation_utils import (
    decode_template, finger_name_for, validate_finger_index, validate_format, validate_quality
)


class TestDecodeTemplate:

    def test_accepts_raw_bytes(self):
        assert decode_template(b"\x01\x02\x03") == b"\x01\x02\x03"
        assert decode_template(bytearray(b"\x01")) == b"\x01"
        assert decode_template(memoryview(b"\x07\x08")) == b"\x07\x08"

    def test_accepts_base64_text(self):
        raw = bytes(range(256))
        assert decode_template(base64.b64encode(raw).decode()) == raw

    @pytest.mark.parametrize("value", ["not base64!!", "abc", "@@@@"])
    def test_rejects_malformed_base64(self, value):
        with pytest.raises(ValidationError):
            decode_template(value)

    @pytest.mark.parametrize("value", [b"", "", None])
    def test_rejects_empty_template(self, value):
        with pytest.raises(ValidationError):
            decode_template(value)

    def test_size_boundaries(self):
        assert len(decode_template(b"\x00" * MAX_TEMPLATE_BYTES)) == 10_485_760

        with pytest.raises(ValidationError):
            decode_template(b"\x00" * (MAX_TEMPLATE_BYTES + 1))

    def test_rejects_other_types(self):
        with pytest.raises(ValidationError):
            decode_template(12345)


class TestFieldValidators:

    @pytest.mark.parametrize("index", [0, 1, 9, None])
    def test_valid_finger_index(self, index):
        assert validate_finger_index(index) == index

    @pytest.mark.parametrize("index", [-1, 10, True, "1"])
    def test_invalid_finger_index(self, index):
        with pytest.raises(ValidationError):
            validate_finger_index(index)

    def test_finger_names(self):
        assert finger_name_for(0) == "RIGHT_THUMB"
        assert finger_name_for(1) == "RIGHT_INDEX"
        assert finger_name_for(4) == "RIGHT_PINKY"
        assert finger_name_for(5) == "LEFT_THUMB"
        assert finger_name_for(9) == "LEFT_PINKY"
        assert finger_name_for(None) == "UNKNOWN"

    @pytest.mark.parametrize("quality", [0, 55, 100, None])
    def test_valid_quality(self, quality):
        assert validate_quality(quality) == quality

    @pytest.mark.parametrize("quality", [-1, 101, 50.5])
    def test_invalid_quality(self, quality):
        with pytest.raises(ValidationError):
            validate_quality(quality)

    def test_format_defaults_to_iso_19794_2(self):
        assert validate_format(None) is TemplateFormat.ISO_19794_2

    def test_format_accepts_enum_and_text(self):
        assert validate_format("ANSI_378") is TemplateFormat.ANSI_378
        assert validate_format(TemplateFormat.PROPRIETARY) is TemplateFormat.PROPRIETARY

    def test_unknown_format_is_rejected(self):
        with pytest.raises(ValidationError):
            validate_format("WSQ")
