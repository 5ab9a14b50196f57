from datetime import timedelta

import pytest

from autodown.core.lease import parse_bool, parse_duration
from autodown.errors import LeaseParseError


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("30m", timedelta(minutes=30)),
        ("2h", timedelta(hours=2)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5h", timedelta(minutes=90)),
        ("90s", timedelta(seconds=90)),
        ("250ms", timedelta(milliseconds=250)),
        ("10us", timedelta(microseconds=10)),
        ("0", timedelta(0)),
        ("0s", timedelta(0)),
    ],
)
def test_parse_duration_ok(value: str, expected: timedelta) -> None:
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["", " ", "abc", "1xs", "10", "-1h", "+1h", "1h 30m", " 10m ", "10m\n", "h", "1d"])
def test_parse_duration_invalid(value: str) -> None:
    with pytest.raises(LeaseParseError):
        parse_duration(value)


def test_lease_parse_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        parse_duration("soon")


@pytest.mark.parametrize("value", ["1", "t", "T", "true", "TRUE", "True"])
def test_parse_bool_true(value: str) -> None:
    assert parse_bool(value) is True


@pytest.mark.parametrize("value", ["0", "f", "F", "false", "FALSE", "False"])
def test_parse_bool_false(value: str) -> None:
    assert parse_bool(value) is False


@pytest.mark.parametrize("value", ["", "yes", "on", "tRuE", "2"])
def test_parse_bool_unparseable(value: str) -> None:
    assert parse_bool(value) is None
