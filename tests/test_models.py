"""Tests for agreement encoding and the status models."""

import pytest

from cookiepm.models import (
    AGREEMENT_TYPES,
    AgreementStatus,
    AgreementValue,
    decode_types,
    encode_types,
    normalize,
    strip_fragment,
)


class TestEncodeDecode:
    def test_type_only(self):
        assert encode_types("deny") == "deny"

    def test_type_and_sub_type(self):
        assert encode_types("explicit", "close-button") == "explicit/close-button"

    def test_empty_sub_type_omitted(self):
        assert encode_types("implicit", "") == "implicit"

    def test_decode_none(self):
        assert decode_types(None) == ("", "")

    def test_decode_empty(self):
        assert decode_types("") == ("", "")

    def test_decode_type_only(self):
        assert decode_types("deny") == ("deny", "")

    def test_decode_extra_segments_ignored(self):
        assert decode_types("explicit/a/b") == ("explicit", "a")

    @pytest.mark.parametrize("agreement_type", sorted(AGREEMENT_TYPES))
    @pytest.mark.parametrize("sub_type", ["", "navigation", "close-button"])
    def test_round_trip(self, agreement_type, sub_type):
        assert decode_types(encode_types(agreement_type, sub_type)) == (agreement_type, sub_type)


class TestHelpers:
    def test_strip_fragment(self):
        assert strip_fragment("https://example.com/a#top") == "https://example.com/a"

    def test_strip_fragment_keeps_query(self):
        assert strip_fragment("https://example.com/?q=1#x#y") == "https://example.com/?q=1"

    def test_strip_fragment_without_hash(self):
        assert strip_fragment("https://example.com/") == "https://example.com/"

    def test_normalize_trims_and_lowers(self):
        assert normalize("  Explicit ") == "explicit"

    @pytest.mark.parametrize("value", [None, 1, ["explicit"], True])
    def test_normalize_non_string(self, value):
        assert normalize(value) == ""


class TestAgreementValue:
    def test_no_record_not_allowed(self):
        value = AgreementValue.from_raw(None)
        assert value.allowed is False
        assert value.exists is False

    def test_deny_not_allowed(self):
        assert AgreementValue.from_raw("deny/banner").allowed is False

    @pytest.mark.parametrize("raw", ["explicit", "implicit/navigation"])
    def test_allowed_types(self, raw):
        assert AgreementValue.from_raw(raw).allowed is True

    def test_unknown_type_not_allowed(self):
        value = AgreementValue.from_raw("maybe/later")
        assert value.allowed is False
        assert value.type == "maybe"

    def test_encode(self):
        assert AgreementValue.from_raw("implicit/navigation").encode() == "implicit/navigation"


class TestAgreementStatus:
    def test_from_value(self):
        status = AgreementStatus.from_value(AgreementValue.from_raw("explicit/close-button"))
        assert status == AgreementStatus(allowed=True, because="explicit/close-button")

    def test_to_dict(self):
        assert AgreementStatus(allowed=False).to_dict() == {"allowed": False, "because": ""}
