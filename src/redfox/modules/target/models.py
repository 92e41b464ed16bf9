"""Target model."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True, slots=True)
class Target:
    """Connection parameters for one login endpoint."""

    scheme: str
    host: str
    port: int
    path: str = "/"
    query: str = ""
    verify_tls: bool = False

    @property
    def netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        if DEFAULT_PORTS.get(self.scheme) == self.port:
            return host
        return f"{host}:{self.port}"

    @property
    def url(self) -> str:
        url = f"{self.scheme}://{self.netloc}{self.path or '/'}"
        if self.query:
            url += f"?{self.query}"
        return url

    def to_dict(self) -> dict[str, object]:
        return {
            "url": self.url,
            "scheme": self.scheme,
            "host": self.host,
            "port": self.port,
            "path": self.path,
            "query": self.query,
            "verify_tls": self.verify_tls,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Target:
        return cls(
            scheme=str(data["scheme"]),
            host=str(data["host"]),
            port=int(data["port"]),  # type: ignore[arg-type]
            path=str(data.get("path") or "/"),
            query=str(data.get("query") or ""),
            verify_tls=bool(data.get("verify_tls", False)),
        )
