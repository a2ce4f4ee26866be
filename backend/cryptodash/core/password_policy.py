"""
CryptoDash - Password Policy
Strength rules checked independently of hashing.
"""
import re
from dataclasses import dataclass, field


SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")

# bcrypt only reads this many bytes of input and refuses longer passwords
MAX_PASSWORD_BYTES = 72


@dataclass
class PasswordValidation:
    """Result of a password policy check."""
    is_valid: bool
    errors: list[str] = field(default_factory=list)


def validate_password(
    password: str,
    min_length: int = 8,
    require_complexity: bool = True,
) -> PasswordValidation:
    """
    Check a candidate password against the policy.

    Args:
        password: Plain text candidate
        min_length: Minimum accepted length
        require_complexity: Also require lowercase, uppercase, digit and symbol

    Returns:
        PasswordValidation with every rule that failed
    """
    errors = []

    if len(password) < min_length:
        errors.append(f"Password must be at least {min_length} characters long")

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        errors.append(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")

    if require_complexity:
        if not re.search(r"[a-z]", password):
            errors.append("Password must contain at least one lowercase letter")
        if not re.search(r"[A-Z]", password):
            errors.append("Password must contain at least one uppercase letter")
        if not re.search(r"\d", password):
            errors.append("Password must contain at least one digit")
        if not _SPECIAL_RE.search(password):
            errors.append("Password must contain at least one special character")

    return PasswordValidation(is_valid=not errors, errors=errors)
