"""Tests for input predicates and sanitizers."""

from datetime import date, datetime

import pytest

from healthsync.utils.validators import (
    CheckResult,
    contains_sql_injection,
    contains_xss,
    is_valid_age,
    is_valid_date_range,
    is_valid_dosage,
    is_valid_email,
    is_valid_fcm_token,
    is_valid_frequency,
    is_valid_hex_color,
    is_valid_medication_name,
    is_valid_name,
    is_valid_phone_number,
    is_valid_priority,
    is_valid_role,
    is_valid_severity,
    is_valid_time,
    sanitize_object,
    sanitize_string,
    validate_batch,
    validate_file_upload,
    validate_pagination,
    validate_password,
    validate_search_query,
)


def test_email():
    """Test email validation."""
    assert is_valid_email("Jane.Doe@Example.com")
    assert not is_valid_email("jane@example")
    assert not is_valid_email("")
    assert not is_valid_email(None)


def test_password_strength():
    """Test password strength."""
    strong = validate_password("Sup3r$ecretPass")
    assert strong.is_valid
    assert strong.strength == "strong"

    medium = validate_password("Password1")
    assert medium.is_valid
    assert medium.strength == "medium"

    weak = validate_password("short")
    assert not weak.is_valid
    assert "Password must be at least 8 characters long" in weak.errors
    assert weak.strength == "weak"

    assert validate_password(None).errors == ["Password is required"]


@pytest.mark.parametrize("phone", ["(555) 123-4567", "555-123-4567", "+1 555 123 4567"])
def test_valid_phone_numbers(phone):
    """Test valid phone numbers."""
    assert is_valid_phone_number(phone)


@pytest.mark.parametrize("phone", ["123", "+44 20 7946 0958 12", "", None])
def test_invalid_phone_numbers(phone):
    """Test invalid phone numbers."""
    assert not is_valid_phone_number(phone)


def test_age():
    """Test age validation."""
    assert is_valid_age(0)
    assert is_valid_age(150)
    assert not is_valid_age(151)
    assert not is_valid_age(-1)
    assert not is_valid_age(True)
    assert not is_valid_age("30")


def test_names():
    """Test name validation."""
    assert is_valid_name("Mary-Jane O'Neil")
    assert not is_valid_name("J")
    assert not is_valid_name("R2D2")
    assert is_valid_medication_name("Vitamin D3")
    assert not is_valid_medication_name("A")
    assert not is_valid_medication_name("x" * 101)


@pytest.mark.parametrize("dosage", ["100mg", "2.5 ml", "1 unit", "400 IU", "50mcg", "1g"])
def test_valid_dosages(dosage):
    """Test valid dosages."""
    assert is_valid_dosage(dosage)


@pytest.mark.parametrize("dosage", ["mg", "100", "two pills", ""])
def test_invalid_dosages(dosage):
    """Test invalid dosages."""
    assert not is_valid_dosage(dosage)


def test_time_and_color():
    """Test time and color validation."""
    assert is_valid_time("08:00")
    assert is_valid_time("8:05")
    assert is_valid_time("23:59")
    assert not is_valid_time("24:00")
    assert not is_valid_time("12:60")
    assert is_valid_hex_color("#FFAA00")
    assert is_valid_hex_color("#fa0")
    assert not is_valid_hex_color("FFAA00")
    assert not is_valid_hex_color("#GGGGGG")


def test_enumerations():
    """Test enumerated value validators."""
    assert is_valid_severity(1)
    assert is_valid_severity(5)
    assert not is_valid_severity(0)
    assert not is_valid_severity(6)
    assert not is_valid_severity(3.0)
    assert is_valid_role("doctor")
    assert not is_valid_role("admin")
    assert is_valid_frequency("asNeeded")
    assert not is_valid_frequency("hourly")
    assert is_valid_priority("high")
    assert not is_valid_priority("urgent")


def test_fcm_token_length():
    """Test FCM token length."""
    assert is_valid_fcm_token("a" * 150)
    assert not is_valid_fcm_token("a" * 99)
    assert not is_valid_fcm_token("a" * 201)


def test_sanitize_string():
    """Test sanitize string."""
    assert sanitize_string("  <b>Headache</b>  ") == "bHeadache/b"
    assert sanitize_string(None) == ""
    assert len(sanitize_string("x" * 2000)) == 1000


def test_sanitize_object_recurses():
    """Test sanitize object recurses."""
    data = {"name": " <Aspirin> ", "meta": {"note": "<script>"}, "count": 3}

    assert sanitize_object(data) == {"name": "Aspirin", "meta": {"note": "script"}, "count": 3}


def test_file_upload():
    """Test file upload."""
    assert validate_file_upload("scan.pdf", 1024, "application/pdf").is_valid

    result = validate_file_upload("virus.exe", 20 * 1024 * 1024, "application/octet-stream")
    assert not result.is_valid
    assert result.errors == [
        "File size exceeds 10MB limit",
        "File type not allowed (only JPEG, PNG, PDF)",
        "File type not allowed for security reasons",
    ]


def test_date_range():
    """Test date range validation."""
    assert is_valid_date_range(date(2024, 1, 1), date(2024, 1, 1))
    assert not is_valid_date_range(date(2024, 1, 2), date(2024, 1, 1))
    assert not is_valid_date_range(date(2024, 1, 1), datetime(2024, 1, 2))
    assert not is_valid_date_range("2024-01-01", "2024-01-02")


def test_pagination():
    """Test pagination."""
    result = validate_pagination(25, 50)
    assert result.is_valid
    assert result.sanitized.limit == 25
    assert result.sanitized.offset == 50

    defaults = validate_pagination()
    assert defaults.sanitized.limit == 10
    assert defaults.sanitized.offset == 0

    invalid = validate_pagination(500, -1)
    assert not invalid.is_valid
    assert invalid.errors == ["Limit cannot exceed 100", "Offset must be a non-negative number"]
    assert invalid.sanitized.limit == 10
    assert invalid.sanitized.offset == 0

    assert validate_pagination(7.9).sanitized.limit == 7


def test_injection_detection():
    """Test injection detection."""
    assert contains_sql_injection("1 OR 1=1")
    assert contains_sql_injection("x'; DROP TABLE users")
    assert not contains_sql_injection("ibuprofen")
    assert contains_xss("<script>alert(1)</script>")
    assert contains_xss("javascript:void(0)")
    assert not contains_xss("headache after lunch")


def test_search_query():
    """Test search query."""
    assert validate_search_query("  aspirin ") == "aspirin"
    assert validate_search_query("a") is None
    assert validate_search_query("<iframe src=x>") is None
    assert validate_search_query(None) is None


def test_validate_batch_collects_errors():
    """Test validate batch collects errors."""
    merged = validate_batch(
        [
            CheckResult(is_valid=True),
            CheckResult(is_valid=False, errors=["first"]),
            CheckResult(is_valid=False, errors=["second", "third"]),
        ]
    )

    assert not merged.is_valid
    assert merged.errors == ["first", "second", "third"]
