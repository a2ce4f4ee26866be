"""
Unit Tests - Password Policy
"""
import pytest

from cryptodash.core.password_policy import PasswordValidation, validate_password


class TestValidatePassword:
    """Tests for the pure password policy check."""

    def test_strong_password_is_valid(self):
        result = validate_password("Passw0rd!")
        assert isinstance(result, PasswordValidation)
        assert result.is_valid is True
        assert result.errors == []

    def test_too_short(self):
        result = validate_password("Pa0!")
        assert result.is_valid is False
        assert any("at least 8 characters" in e for e in result.errors)

    @pytest.mark.parametrize("password, fragment", [
        ("PASSW0RD!", "lowercase"),
        ("passw0rd!", "uppercase"),
        ("Password!", "digit"),
        ("Passw0rdd", "special character"),
    ])
    def test_missing_character_class(self, password, fragment):
        result = validate_password(password)
        assert result.is_valid is False
        assert len(result.errors) == 1
        assert fragment in result.errors[0]

    def test_reports_every_failure(self):
        result = validate_password("abc")
        assert result.is_valid is False
        # length, uppercase, digit, special
        assert len(result.errors) == 4

    def test_complexity_optional(self):
        result = validate_password("simplepassword", require_complexity=False)
        assert result.is_valid is True

    def test_custom_min_length(self):
        assert validate_password("Pa0!abcd", min_length=12).is_valid is False
        assert validate_password("Pa0!abcdefgh", min_length=12).is_valid is True

    def test_too_long_for_bcrypt(self):
        result = validate_password("Aa1!" + "x" * 76)
        assert result.is_valid is False
        assert result.errors == ["Password must be at most 72 bytes long"]

    def test_byte_limit_counts_utf8_bytes(self):
        # 40 two-byte characters plus 4 ASCII: 44 characters, 84 bytes
        result = validate_password("Aa1!" + "é" * 40)
        assert result.is_valid is False
        assert any("72 bytes" in e for e in result.errors)

    def test_exactly_72_bytes_is_valid(self):
        assert validate_password("Aa1!" + "x" * 68).is_valid is True

    def test_byte_limit_applies_without_complexity(self):
        assert validate_password("x" * 73, require_complexity=False).is_valid is False
