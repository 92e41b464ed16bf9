"""URL and proxy validation for the ``validate`` command."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from urllib.parse import urlsplit


@dataclass
class ValidationResult:
    """Collected validation errors and warnings."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


def validate_url(url: str) -> ValidationResult:
    """Check that a URL is usable as a scan target."""
    result = ValidationResult()
    if not url.startswith(("http://", "https://")):
        result.add_error("URL must start with http:// or https://")
        return result

    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        result.add_error(f"Invalid URL: {exc}")
        return result

    host = parts.hostname
    if not host:
        result.add_error("Invalid URL: no host")
        return result

    if port == 0:
        result.add_error(f"Invalid port: {port}")
    if host == "localhost" or _is_loopback(host):
        result.add_warning("URL points to the local host")
    elif _is_private(host):
        result.add_warning("URL points to a private address")
    if parts.scheme == "http" and port == 80:
        result.add_warning("Port 80 is the HTTP default and can be omitted")
    if parts.scheme == "https" and port == 443:
        result.add_warning("Port 443 is the HTTPS default and can be omitted")
    if parts.scheme == "http":
        result.add_warning("Credentials will be sent over plain HTTP")
    return result


def validate_proxy(proxy_url: str) -> ValidationResult:
    """Check a proxy URL (http, https, socks5)."""
    result = ValidationResult()
    try:
        parts = urlsplit(proxy_url)
        port = parts.port
    except ValueError as exc:
        result.add_error(f"Invalid proxy URL: {exc}")
        return result

    if parts.scheme not in {"http", "https", "socks5", "socks5h"}:
        result.add_error(f"Unsupported proxy scheme: {parts.scheme or '(none)'}")
    if not parts.hostname:
        result.add_error("Proxy URL has no host")
    if port is None:
        result.add_warning("Proxy URL has no explicit port")
    return result


def _ip(host: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        return None


def _is_loopback(host: str) -> bool:
    address = _ip(host)
    return bool(address and address.is_loopback)


def _is_private(host: str) -> bool:
    address = _ip(host)
    return bool(address and address.is_private)
