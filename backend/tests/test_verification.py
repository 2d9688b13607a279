import hashlib
import re

from pathwise.core import verification
from pathwise.core.verification import (
    MS_PER_HOUR,
    canonical_input,
    check_code,
    derive_code,
    expected_code,
    hour_window,
)

HEX12 = re.compile(r"^[0-9a-f]{12}$")


def test_hour_window_floors_milliseconds():
    assert hour_window(0) == 0
    assert hour_window(MS_PER_HOUR - 1) == 0
    assert hour_window(MS_PER_HOUR) == 1
    assert hour_window(12345 * MS_PER_HOUR + 1_800_000) == 12345


def test_hour_window_defaults_to_wall_clock(monkeypatch):
    monkeypatch.setattr(verification, "current_time_ms", lambda: 7 * MS_PER_HOUR + 5)
    assert hour_window() == 7


def test_derive_code_matches_truncated_sha256():
    assert canonical_input("S", 12345, "T") == "S-12345-T"
    assert derive_code("S", 12345, "T") == hashlib.sha256(b"S-12345-T").hexdigest()[:12]


def test_derive_code_changes_with_window():
    assert derive_code("S", 12345, "T") != derive_code("S", 12346, "T")


def test_derive_code_is_twelve_lowercase_hex_chars():
    for window in (0, 1, 12345, 10**9):
        assert HEX12.match(derive_code("subject", window, "salt"))
    assert HEX12.match(derive_code("ünïcode", 42, "sält"))


def test_same_hour_gives_same_code():
    start = 12345 * MS_PER_HOUR
    assert expected_code("S", "T", start) == expected_code("S", "T", start + MS_PER_HOUR - 1)
    assert expected_code("S", "T", start) != expected_code("S", "T", start + MS_PER_HOUR)


def test_check_code_accepts_current_window_repeatedly():
    now = 500 * MS_PER_HOUR + 10
    code = derive_code("S", 500, "T")
    assert check_code(code, subject="S", salt="T", now_ms=now) is True
    assert check_code(code, subject="S", salt="T", now_ms=now + 60_000) is True


def test_check_code_has_no_grace_for_previous_window():
    previous = derive_code("S", 499, "T")
    assert check_code(previous, subject="S", salt="T", now_ms=500 * MS_PER_HOUR) is False


def test_check_code_rejects_other_strings():
    now = 500 * MS_PER_HOUR
    code = derive_code("S", 500, "T")
    assert check_code(code.upper(), subject="S", salt="T", now_ms=now) is False
    assert check_code(code[:11], subject="S", salt="T", now_ms=now) is False
    assert check_code("", subject="S", salt="T", now_ms=now) is False
    assert check_code(code, subject="other", salt="T", now_ms=now) is False
