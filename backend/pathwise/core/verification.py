"""Hour-bucketed verification codes.

A code is the first 12 hex characters of
``sha256("{subject}-{window}-{salt}")`` where ``window`` is the number of
whole hours since the Unix epoch. The expected code is recomputed on every
check and never stored, so a code stays valid for the rest of its hour and can
be replayed within it. There is no grace period across the hour boundary.
"""
import hashlib
import time

MS_PER_HOUR = 3_600_000
CODE_LENGTH = 12


def current_time_ms() -> int:
    return time.time_ns() // 1_000_000


def hour_window(now_ms: int | None = None) -> int:
    if now_ms is None:
        now_ms = current_time_ms()
    return now_ms // MS_PER_HOUR


def canonical_input(subject: str, window: int, salt: str) -> str:
    return f"{subject}-{window}-{salt}"


def derive_code(subject: str, window: int, salt: str) -> str:
    digest = hashlib.sha256(canonical_input(subject, window, salt).encode("utf-8")).hexdigest()
    return digest[:CODE_LENGTH]


def expected_code(subject: str, salt: str, now_ms: int | None = None) -> str:
    return derive_code(subject, hour_window(now_ms), salt)


def check_code(code: str, *, subject: str, salt: str, now_ms: int | None = None) -> bool:
    # Plain equality; the code is short-lived and the window is public.
    return code == expected_code(subject, salt, now_ms)
