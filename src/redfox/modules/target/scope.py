"""Engagement scope enforcement."""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass, field

from redfox.errors import ScopeError

from .models import Target

logger = logging.getLogger(__name__)


@dataclass
class Scope:
    """Allowlist of hosts, ``*.domain`` wildcards, IPs and CIDR networks.

    An empty allowlist places no restriction on targets.
    """

    allowed: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._networks: list[ipaddress.IPv4Network | ipaddress.IPv6Network] = []
        self._hosts: set[str] = set()
        self._suffixes: list[str] = []
        for entry in self.allowed:
            entry = entry.strip().lower()
            if not entry:
                continue
            if entry.startswith("*."):
                self._suffixes.append(entry[1:])
                continue
            try:
                self._networks.append(ipaddress.ip_network(entry, strict=False))
            except ValueError:
                self._hosts.add(entry)

    @property
    def unrestricted(self) -> bool:
        return not (self._networks or self._hosts or self._suffixes)

    def permits(self, target: Target) -> bool:
        if self.unrestricted:
            return True
        host = target.host.lower()
        if host in self._hosts:
            return True
        if any(host.endswith(suffix) for suffix in self._suffixes):
            return True
        try:
            address = ipaddress.ip_address(host)
        except ValueError:
            return False
        return any(address in network for network in self._networks)

    def enforce(self, target: Target) -> None:
        """Raise ScopeError when the target is outside the allowlist."""
        if not self.permits(target):
            raise ScopeError(
                f"Out of scope: {target.host} is not in scanning.allowed_targets "
                f"({', '.join(self.allowed)})"
            )
        logger.debug("Target %s is in scope", target.host)
