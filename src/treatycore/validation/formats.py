"""
String format checks and format-specific sample values.

Format names are matched case-insensitively.  Unknown formats always pass
validation and fall back to a generic sample.
"""

from __future__ import annotations

import base64
import binascii
import ipaddress
import re
import uuid
from collections.abc import Callable
from datetime import date, datetime, time, timezone
from urllib.parse import urlparse

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_HOST_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


def is_email(value: str) -> bool:
    return bool(value) and _EMAIL_RE.match(value) is not None


def is_absolute_uri(value: str) -> bool:
    if not value or any(ch.isspace() for ch in value):
        return False
    parsed = urlparse(value)
    if not parsed.scheme or not _SCHEME_RE.match(parsed.scheme):
        return False
    return bool(parsed.netloc or parsed.path)


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _parse_datetime(value: str) -> datetime:
    # fromisoformat only learned the 'Z' suffix in 3.11
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def is_date_time(value: str) -> bool:
    try:
        _parse_datetime(value)
    except ValueError:
        return False
    return True


def is_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_time(value: str) -> bool:
    try:
        time.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def is_ipv6(value: str) -> bool:
    try:
        ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return True


def is_hostname(value: str) -> bool:
    if not value or len(value) > 253:
        return False
    labels = value.rstrip(".").split(".")
    return all(_HOST_LABEL_RE.match(label) for label in labels)


def is_base64(value: str) -> bool:
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


FORMAT_CHECKERS: dict[str, Callable[[str], bool]] = {
    "email": is_email,
    "uri": is_absolute_uri,
    "url": is_absolute_uri,
    "uuid": is_uuid,
    "date-time": is_date_time,
    "date": is_date,
    "time": is_time,
    "ipv4": is_ipv4,
    "ipv6": is_ipv6,
    "hostname": is_hostname,
    "byte": is_base64,
}


def check_format(format_name: str, value: str) -> bool:
    """Return True when *value* satisfies *format_name* (unknown formats pass)."""
    checker = FORMAT_CHECKERS.get(format_name.lower())
    if checker is None:
        return True
    return checker(value)


# ---------------------------------------------------------------------------
# Samples
# ---------------------------------------------------------------------------


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


FORMAT_SAMPLES: dict[str, Callable[[], str]] = {
    "email": lambda: "user@example.com",
    "uri": lambda: "https://example.com",
    "url": lambda: "https://example.com",
    "uuid": lambda: str(uuid.uuid4()),
    "date-time": lambda: _now().isoformat(),
    "date": lambda: _now().date().isoformat(),
    "time": lambda: _now().time().isoformat(),
    "ipv4": lambda: "192.168.1.1",
    "ipv6": lambda: "::1",
    "hostname": lambda: "example.com",
    "byte": lambda: base64.b64encode(b"sample").decode("ascii"),
}

DEFAULT_STRING_SAMPLE = "string"


def sample_for_format(format_name: str | None) -> str:
    if format_name is None:
        return DEFAULT_STRING_SAMPLE
    factory = FORMAT_SAMPLES.get(format_name.lower())
    if factory is None:
        return DEFAULT_STRING_SAMPLE
    return factory()
