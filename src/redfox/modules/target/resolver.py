"""Target specification parsing."""

from __future__ import annotations

import logging
import re
import socket
from pathlib import Path
from urllib.parse import urlsplit

from redfox.errors import InputError, PermanentNetworkError

from .models import DEFAULT_PORTS, Target

logger = logging.getLogger(__name__)

_HOST_PORT_RE = re.compile(r"^(?:\[(?P<v6>[0-9a-fA-F:.]+)\]|(?P<host>[^:/\s]+))(?::(?P<port>\d+))?$")


def resolve_target(value: str, verify_tls: bool = False) -> Target:
    """Parse a URL, ``host:port`` or bare host into a Target."""
    value = (value or "").strip()
    if not value:
        raise InputError("Target must not be empty")

    if "://" in value:
        return _from_url(value, verify_tls)

    match = _HOST_PORT_RE.match(value.split("/", 1)[0])
    if not match:
        raise InputError(f"Cannot parse target: {value!r}")
    host = match.group("v6") or match.group("host")
    port_text = match.group("port")
    port = _parse_port(port_text, value) if port_text else 80
    scheme = "https" if port == 443 else "http"
    path = "/" + value.split("/", 1)[1] if "/" in value else "/"
    return Target(scheme=scheme, host=host.lower(), port=port, path=path, verify_tls=verify_tls)


def _from_url(value: str, verify_tls: bool) -> Target:
    try:
        parts = urlsplit(value)
        port = parts.port
    except ValueError as exc:
        raise InputError(f"Invalid target URL {value!r}: {exc}") from exc

    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise InputError(f"Unsupported scheme {parts.scheme!r} (use http or https)")
    if not parts.hostname:
        raise InputError(f"Target URL has no host: {value!r}")
    return Target(
        scheme=scheme,
        host=parts.hostname.lower(),
        port=port or DEFAULT_PORTS[scheme],
        path=parts.path or "/",
        query=parts.query,
        verify_tls=verify_tls,
    )


def _parse_port(text: str, value: str) -> int:
    port = int(text)
    if not 0 < port < 65536:
        raise InputError(f"Invalid port in target {value!r}")
    return port


def resolve_targets(value: str, verify_tls: bool = False) -> list[Target]:
    """Resolve a target, a comma-separated list or a file of targets."""
    value = (value or "").strip()
    path = Path(value).expanduser()
    if value and "://" not in value and path.is_file():
        entries = []
        for line in path.read_text(encoding="utf-8", errors="ignore").splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                entries.append(line)
        if not entries:
            raise InputError(f"Target list {path} is empty")
    else:
        entries = [item.strip() for item in value.split(",") if item.strip()]

    targets: list[Target] = []
    seen: set[str] = set()
    for entry in entries:
        target = resolve_target(entry, verify_tls=verify_tls)
        if target.url in seen:
            continue
        seen.add(target.url)
        targets.append(target)
    if not targets:
        raise InputError("No targets given")
    return targets


def check_resolvable(target: Target) -> None:
    """Resolve the target host, raising PermanentNetworkError on DNS failure."""
    try:
        socket.getaddrinfo(target.host, target.port, type=socket.SOCK_STREAM)
    except socket.gaierror as exc:
        raise PermanentNetworkError(f"Cannot resolve {target.host}: {exc}") from exc
    logger.debug("Resolved %s", target.host)
