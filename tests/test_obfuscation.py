"""
Tests for the session value obfuscation codec
"""

import base64
import json

import pytest
from advice_errors import DecodeError
from obfuscation import decode, encode, is_obfuscated, load_token


class TestEncodeDecode:

    def test_round_trip_korean_object(self):
        """Nested Korean strings survive encode/decode"""
        value = {'mainIssue': '임대차 보증금', 'details': {'amount': '5천만원', 'tags': ['전세', '반환']}}

        assert decode(encode(value)) == value

    def test_round_trip_plain_string(self):
        assert decode(encode("교통사고 합의금 문제")) == "교통사고 합의금 문제"

    def test_token_is_base64_of_percent_encoding(self):
        token = encode({"a": "가"})
        inner = base64.b64decode(token).decode('ascii')

        assert inner == "%7B%22a%22%3A%20%22%EA%B0%80%22%7D"

    def test_object_token_starts_with_prefix(self):
        """Encoded objects begin with Base64 of '%7B' rather than '{"'"""
        token = encode({"mainIssue": "x"})

        assert "{" not in token
        assert is_obfuscated(token)

    def test_unserializable_value_degrades_to_plain_json(self):
        """Encoding never raises"""
        token = encode({"when": object()})

        assert token.startswith("{")
        assert json.loads(token)["when"].startswith("<object")

    def test_self_referencing_value_degrades_to_repr(self):
        """Circular structures are stored as their repr text"""
        value = {}
        value["self"] = value

        token = encode(value)

        assert decode(token) == repr(value)

    def test_legacy_plain_json(self):
        """Tokens written before obfuscation are plain JSON"""
        assert decode('{"mainIssue": "임대 문제"}') == {"mainIssue": "임대 문제"}

    def test_undecodable_token(self):
        with pytest.raises(DecodeError):
            decode("not a token at all {")

    def test_empty_token(self):
        with pytest.raises(DecodeError):
            decode("")


class TestDetection:

    @pytest.mark.parametrize("token,expected", [
        ("eyJtYWluSXNzdWUiOiAieCJ9", True),
        ("JTdCJTIy", True),
        ('{"mainIssue": "x"}', False),
        ("eyJ{", True),
    ])
    def test_is_obfuscated(self, token, expected):
        assert is_obfuscated(token) is expected

    def test_load_token_legacy_path(self):
        assert load_token('{"mainIssue": "상속"}') == {"mainIssue": "상속"}

    def test_load_token_encoded_path(self):
        assert load_token(encode({"mainIssue": "상속"})) == {"mainIssue": "상속"}

    def test_load_token_bad_legacy(self):
        with pytest.raises(DecodeError):
            load_token('{"mainIssue": ')

    def test_prefixed_base64_of_raw_json(self):
        """Base64 of raw JSON (no percent encoding) still decodes"""
        token = base64.b64encode(b'{"mainIssue": "x"}').decode('ascii')

        assert token.startswith("eyJ")
        assert load_token(token) == {"mainIssue": "x"}
