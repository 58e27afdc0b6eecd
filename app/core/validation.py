import re
from typing import Optional
from urllib.parse import urlparse

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# DNS labels (letters, digits, inner hyphens) or a bracketed IPv6 literal
HOST_LABEL = r"(?!-)[A-Za-z0-9-]{1,63}(?<!-)"
HOSTNAME_PATTERN = re.compile(rf"^{HOST_LABEL}(\.{HOST_LABEL})*\.?$")
IPV6_PATTERN = re.compile(r"^[0-9A-Fa-f:.]+$")


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def _is_valid_host(host: Optional[str]) -> bool:
    if not host:
        return False
    if ":" in host:
        return IPV6_PATTERN.match(host) is not None
    return HOSTNAME_PATTERN.match(host) is not None


def is_valid_url(value: Optional[str]) -> bool:
    """Absolute http(s) URL with a well-formed host and an in-range port."""
    if not value or not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
        # raises ValueError for non-numeric or out-of-range ports
        parsed.port
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https"):
        return False
    return _is_valid_host(parsed.hostname)


def clean_name(value: Optional[str]) -> Optional[str]:
    """Trimmed name, or None when missing/blank."""
    if value is None:
        return None
    value = value.strip()
    return value or None
