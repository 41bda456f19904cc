"""Input predicates and sanitizers used by the request schemas."""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal

VALID_ROLES = ("patient", "doctor")
VALID_FREQUENCIES = ("daily", "weekly", "asNeeded")
VALID_PRIORITIES = ("low", "normal", "high")

SEVERITY_MIN = 1
SEVERITY_MAX = 5

MAX_STRING_LENGTH = 1000
MAX_FILE_SIZE = 10 * 1024 * 1024
ALLOWED_FILE_TYPES = ("image/jpeg", "image/png", "image/jpg", "application/pdf")
DANGEROUS_EXTENSIONS = (".exe", ".bat", ".sh", ".cmd", ".js")

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NAME_RE = re.compile(r"^[a-zA-Z\s'-]{2,50}$")
_DOSAGE_RE = re.compile(r"^\d+(\.\d+)?\s*(mg|g|ml|mcg|IU|units?)$", re.IGNORECASE)
_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
_HEX_COLOR_RE = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
_SPECIAL_CHAR_RE = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

_SQL_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"(\bOR\b|\bAND\b).*?=",
        r"UNION.*?SELECT",
        r"DROP.*?TABLE",
        r"INSERT.*?INTO",
        r"DELETE.*?FROM",
        r"--",
        r";.*?DROP",
        r";.*?DELETE",
    )
)

_XSS_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"<script",
        r"javascript:",
        r"onerror=",
        r"onload=",
        r"onclick=",
        r"<iframe",
        r"eval\(",
    )
)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a multi-rule check."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PasswordCheck(CheckResult):
    strength: Literal["weak", "medium", "strong"] = "weak"


@dataclass(frozen=True)
class Pagination:
    limit: int = DEFAULT_PAGE_LIMIT
    offset: int = 0


@dataclass(frozen=True)
class PaginationCheck(CheckResult):
    sanitized: Pagination = field(default_factory=Pagination)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_valid_email(email: Any) -> bool:
    if not email or not isinstance(email, str):
        return False
    return bool(_EMAIL_RE.match(email.strip().lower()))


def validate_password(password: Any) -> PasswordCheck:
    """Check length and character classes and grade the password strength."""
    if not password or not isinstance(password, str):
        return PasswordCheck(is_valid=False, errors=["Password is required"])

    errors = []
    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")

    has_upper = bool(re.search(r"[A-Z]", password))
    has_lower = bool(re.search(r"[a-z]", password))
    has_digit = bool(re.search(r"[0-9]", password))
    has_special = bool(_SPECIAL_CHAR_RE.search(password))

    if not has_upper:
        errors.append("Password must contain at least one uppercase letter")
    if not has_lower:
        errors.append("Password must contain at least one lowercase letter")
    if not has_digit:
        errors.append("Password must contain at least one number")

    score = sum([has_upper, has_lower, has_digit, has_special, len(password) >= 12])
    if score >= 4:
        strength = "strong"
    elif score >= 3:
        strength = "medium"
    else:
        strength = "weak"

    return PasswordCheck(is_valid=not errors, errors=errors, strength=strength)


def is_valid_phone_number(phone: Any) -> bool:
    """US numbers: 10 digits, or 11 with a leading country code 1."""
    if not phone or not isinstance(phone, str):
        return False
    digits = re.sub(r"\D", "", phone)
    return len(digits) == 10 or (len(digits) == 11 and digits[0] == "1")


def is_valid_age(age: Any) -> bool:
    return _is_int(age) and 0 <= age <= 150


def is_valid_name(name: Any) -> bool:
    if not name or not isinstance(name, str):
        return False
    return bool(_NAME_RE.match(name.strip()))


def is_valid_medication_name(name: Any) -> bool:
    if not name or not isinstance(name, str):
        return False
    return 2 <= len(name.strip()) <= 100


def is_valid_dosage(dosage: Any) -> bool:
    """Amount plus unit, e.g. "100mg", "2.5 ml", "1 unit"."""
    if not dosage or not isinstance(dosage, str):
        return False
    return bool(_DOSAGE_RE.match(dosage.strip()))


def is_valid_time(value: Any) -> bool:
    """24h "HH:MM" (a single-digit hour is accepted)."""
    if not value or not isinstance(value, str):
        return False
    return bool(_TIME_RE.match(value))


def is_valid_hex_color(color: Any) -> bool:
    if not color or not isinstance(color, str):
        return False
    return bool(_HEX_COLOR_RE.match(color))


def is_valid_severity(severity: Any) -> bool:
    return _is_int(severity) and SEVERITY_MIN <= severity <= SEVERITY_MAX


def is_valid_role(role: Any) -> bool:
    return role in VALID_ROLES


def is_valid_frequency(frequency: Any) -> bool:
    return frequency in VALID_FREQUENCIES


def is_valid_priority(priority: Any) -> bool:
    return priority in VALID_PRIORITIES


def is_valid_fcm_token(token: Any) -> bool:
    if not token or not isinstance(token, str):
        return False
    return 100 <= len(token) <= 200


def sanitize_string(value: Any) -> str:
    """Trim, strip angle brackets and cap the length."""
    if not value or not isinstance(value, str):
        return ""
    return re.sub(r"[<>]", "", value.strip())[:MAX_STRING_LENGTH]


def sanitize_object(data: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively sanitize string values of a mapping."""
    sanitized: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            sanitized[key] = sanitize_string(value)
        elif isinstance(value, Mapping):
            sanitized[key] = sanitize_object(value)
        else:
            sanitized[key] = value
    return sanitized


def validate_file_upload(name: str, size: int, content_type: str) -> CheckResult:
    """Check an upload's name, size, MIME type and extension."""
    errors = []

    if not name or len(name) > 255:
        errors.append("Invalid file name")
    if size > MAX_FILE_SIZE:
        errors.append("File size exceeds 10MB limit")
    if content_type not in ALLOWED_FILE_TYPES:
        errors.append("File type not allowed (only JPEG, PNG, PDF)")

    extension = name.lower()[name.rfind(".") :] if name and "." in name else ""
    if extension in DANGEROUS_EXTENSIONS:
        errors.append("File type not allowed for security reasons")

    return CheckResult(is_valid=not errors, errors=errors)


def is_valid_date_range(start: Any, end: Any) -> bool:
    if not isinstance(start, date) or not isinstance(end, date):
        return False
    # datetime and date do not compare with each other
    if isinstance(start, datetime) != isinstance(end, datetime):
        return False
    return start <= end


def validate_pagination(limit: Any = None, offset: Any = None) -> PaginationCheck:
    """
    Check pagination parameters.

    Invalid values are reported and replaced by defaults in ``sanitized``
    (limit 10, offset 0); fractional values are floored.
    """
    errors = []
    sanitized_limit = DEFAULT_PAGE_LIMIT
    sanitized_offset = 0

    if limit is not None:
        if not isinstance(limit, int | float) or isinstance(limit, bool) or limit < 1:
            errors.append("Limit must be a positive number")
        elif limit > MAX_PAGE_LIMIT:
            errors.append(f"Limit cannot exceed {MAX_PAGE_LIMIT}")
        else:
            sanitized_limit = int(limit)

    if offset is not None:
        if not isinstance(offset, int | float) or isinstance(offset, bool) or offset < 0:
            errors.append("Offset must be a non-negative number")
        else:
            sanitized_offset = int(offset)

    return PaginationCheck(
        is_valid=not errors,
        errors=errors,
        sanitized=Pagination(limit=sanitized_limit, offset=sanitized_offset),
    )


def contains_sql_injection(value: Any) -> bool:
    if not value or not isinstance(value, str):
        return False
    return any(pattern.search(value) for pattern in _SQL_PATTERNS)


def contains_xss(value: Any) -> bool:
    if not value or not isinstance(value, str):
        return False
    return any(pattern.search(value) for pattern in _XSS_PATTERNS)


def validate_search_query(query: Any) -> str | None:
    """Trimmed query, or None when too short, too long or suspicious."""
    if not query or not isinstance(query, str):
        return None

    sanitized = query.strip()
    if not 2 <= len(sanitized) <= 100:
        return None
    if contains_sql_injection(sanitized) or contains_xss(sanitized):
        return None
    return sanitized


def validate_batch(results: Iterable[CheckResult]) -> CheckResult:
    """Merge several check results into one."""
    errors = [error for result in results if not result.is_valid for error in result.errors]
    return CheckResult(is_valid=not errors, errors=errors)
