"""Tests for the property schema (yipcvars/schema.py) and value codec (yipcvars/codec.py)."""

import base64

import pytest

from yipcvars import codec
from yipcvars.codec import (
    advance_lastmod,
    encode_hex,
    generate_initial_lastmod,
    generate_secret,
    normalize_value,
    parse_lastmod,
)
from yipcvars.schema import (
    PROPERTIES,
    all_keys,
    bulk_writable_keys,
    canonical_key,
    get_property,
    is_bulk_writable,
    is_queryable,
    queryable_keys,
)
from yipcvars.types import Codec, CvarValueError, SchemaError

# ============================================================================
# Schema
# ============================================================================


class TestSchema:
    def test_key_counts(self):
        assert len(all_keys()) == 19
        assert len(bulk_writable_keys()) == 15
        assert len(queryable_keys()) == 17

    def test_privileged_keys(self):
        for key in ("authsecret", "authpswd"):
            assert not is_queryable(key)
            assert not is_bulk_writable(key)

    def test_epoch_and_lastmod_read_only(self):
        for key in ("epoch", "lastmod"):
            assert is_queryable(key)
            assert not is_bulk_writable(key)

    def test_row_order_starts_with_epoch(self):
        assert list(PROPERTIES)[:2] == ["epoch", "lastmod"]
        assert list(PROPERTIES)[-1] == "pathgenuid"

    def test_path_keys_use_path_codec(self):
        paths = [k for k in PROPERTIES if k.startswith("path")]
        assert len(paths) == 12
        assert all(PROPERTIES[k].codec is Codec.PATH for k in paths)

    def test_unknown_key_rejected(self):
        with pytest.raises(SchemaError, match="not recognized"):
            get_property("pathnowhere")

    @pytest.mark.parametrize("name", ["auth suffix", "auth.secret", "", "épée"])
    def test_invalid_key_name(self, name):
        with pytest.raises(SchemaError, match="Invalid property name"):
            get_property(name)

    def test_hyphenated_spelling(self):
        assert canonical_key("auth-secret") == "authsecret"
        assert get_property("path-login").key == "pathlogin"
        assert not is_queryable("auth-pswd")

    @pytest.mark.parametrize(
        "name", ["e-p-o-c-h", "-lastmod-", "a-u-t-h-c-o-s-t", "auth--cost", "path-log-in"]
    )
    def test_stray_hyphens_not_canonicalised(self, name):
        with pytest.raises(SchemaError, match="not recognized"):
            get_property(name)


# ============================================================================
# Bulk-writable values
# ============================================================================


class TestAuthSuffix:
    @pytest.mark.parametrize("value", ["a", "yip_admin", "X" * 24, "abc123"])
    def test_accepted(self, value):
        assert normalize_value("authsuffix", value) == value

    @pytest.mark.parametrize("value", ["", "X" * 25, "yip-admin", "yip admin", "ünï"])
    def test_rejected(self, value):
        with pytest.raises(CvarValueError):
            normalize_value("authsuffix", value)


class TestAuthLimit:
    @pytest.mark.parametrize(
        "value,expected",
        [("60", "60"), ("0060", "60"), ("1", "1"), ("9999999999", "9999999999"), (60, "60")],
    )
    def test_normalized(self, value, expected):
        assert normalize_value("authlimit", value) == expected

    @pytest.mark.parametrize("value", ["0", "000", "12345678901", "-5", "1.5", "abc", ""])
    def test_rejected(self, value):
        with pytest.raises(CvarValueError):
            normalize_value("authlimit", value)


class TestAuthCost:
    @pytest.mark.parametrize("value,expected", [("5", "5"), ("31", "31"), ("012", "12"), (10, "10")])
    def test_accepted(self, value, expected):
        assert normalize_value("authcost", value) == expected

    @pytest.mark.parametrize("value", ["4", "32", "0", "100", "ten"])
    def test_rejected(self, value):
        with pytest.raises(CvarValueError):
            normalize_value("authcost", value)


class TestPath:
    def test_ascii_path_stored_as_utf8_bytes(self):
        assert normalize_value("pathlogin", "/admin/login") == b"/admin/login"

    def test_non_ascii_path(self):
        assert normalize_value("pathadmin", "/café/管理") == "/café/管理".encode("utf-8")

    @pytest.mark.parametrize(
        "value",
        [
            "admin/login",
            "",
            "/admin\nlogin",
            "/admin\x00",
            "/admin\x7f",
            "/admin\x85",
            "/emoji\U0001f600",
        ],
    )
    def test_rejected(self, value):
        with pytest.raises(CvarValueError):
            normalize_value("pathlogin", value)

    def test_missing_slash_message(self):
        with pytest.raises(CvarValueError, match="must begin with slash"):
            normalize_value("pathlist", "list")


class TestScalars:
    @pytest.mark.parametrize("value", [{"a": 1}, ["/x"], None, True])
    def test_non_scalar_rejected(self, value):
        with pytest.raises(CvarValueError):
            normalize_value("pathlogin", value)

    @pytest.mark.parametrize("key", ["epoch", "lastmod", "authsecret", "authpswd"])
    def test_generated_keys_not_settable(self, key):
        with pytest.raises(CvarValueError, match="can not be set directly"):
            normalize_value(key, "1")


# ============================================================================
# Generated values
# ============================================================================


class TestGenerated:
    def test_secret_is_twelve_bytes_base64(self):
        secret = generate_secret()
        assert len(secret) == 16
        assert "\n" not in secret
        assert len(base64.b64decode(secret)) == 12

    def test_secrets_differ(self):
        assert generate_secret() != generate_secret()

    def test_initial_lastmod_range(self, monkeypatch):
        monkeypatch.setattr(codec.secrets, "randbelow", lambda n: 0)
        assert generate_initial_lastmod() == 1
        monkeypatch.setattr(codec.secrets, "randbelow", lambda n: n - 1)
        assert generate_initial_lastmod() == 4096

    def test_encode_hex_lowercase(self):
        assert encode_hex(0xABCDEF) == "abcdef"
        assert encode_hex(0) == "0"
        with pytest.raises(ValueError):
            encode_hex(-1)


class TestLastmod:
    def test_parse(self):
        assert parse_lastmod("409f") == 0x409F
        assert parse_lastmod("FFFFFFFF") == 0xFFFFFFFF

    @pytest.mark.parametrize("text", ["", "123456789", "xyz", "-1"])
    def test_parse_invalid(self, text):
        with pytest.raises(CvarValueError):
            parse_lastmod(text)

    def test_advance_adds_one_to_sixty_four(self, monkeypatch):
        monkeypatch.setattr(codec.secrets, "randbelow", lambda n: 0)
        assert advance_lastmod("ff") == "100"
        monkeypatch.setattr(codec.secrets, "randbelow", lambda n: n - 1)
        assert advance_lastmod("ff") == encode_hex(0xFF + 64)

    def test_advance_overflow_guard(self):
        assert advance_lastmod(encode_hex(0xFFFFFFFF - 64))
        with pytest.raises(CvarValueError, match="overflow"):
            advance_lastmod(encode_hex(0xFFFFFFFF - 63))
