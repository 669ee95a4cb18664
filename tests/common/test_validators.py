import pytest

from src.parking_system.parking_system.common.validators import (
    clean_names,
    require_email,
    require_min_length,
    require_non_empty,
    require_non_negative,
)
from src.parking_system.parking_system.core.exceptions import ValidationError


def test_require_non_empty_strips():
    assert require_non_empty("  51A ", "Plate number") == "51A"
    with pytest.raises(ValidationError, match="Plate number is required"):
        require_non_empty("   ", "Plate number")


def test_require_email():
    assert require_email(" Mia@Parking.Local ") == "mia@parking.local"
    for bad in ("mia", "@parking.local", "mia@localhost"):
        with pytest.raises(ValidationError):
            require_email(bad)


def test_require_min_length():
    assert require_min_length("123456", "Password", 6) == "123456"
    with pytest.raises(ValidationError, match="at least 6"):
        require_min_length("12345", "Password", 6)


def test_require_non_negative():
    assert require_non_negative("0", "Rate") == 0
    assert require_non_negative(15, "Rate") == 15
    with pytest.raises(ValidationError, match="cannot be negative"):
        require_non_negative("-5", "Rate")
    with pytest.raises(ValidationError, match="must be a number"):
        require_non_negative("1.5", "Rate")


def test_clean_names_keeps_first_occurrence_order():
    assert clean_names([" Bob", "Alice", "", "Bob ", None]) == ["Bob", "Alice"]
    assert clean_names(None) == []
