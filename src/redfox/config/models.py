"""Configuration data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CONFIG_DIR = Path.home() / ".redfox"


@dataclass
class GeneralSettings:
    """Logging settings."""

    log_level: str = "info"
    log_file: str | None = None


@dataclass
class ScanningSettings:
    """Defaults applied to every scan unless overridden on the command line."""

    threads: int = 20
    timeout: float = 30.0
    max_retries: int = 3
    rate_limit: float = 100.0
    burst: int = 1
    user_agent: str = "RedFoxTool/1.0"
    verify_tls: bool = False
    proxy: str | None = None
    max_consecutive_errors: int = 10
    allowed_targets: list[str] = field(default_factory=list)


@dataclass
class WordlistSettings:
    """Default wordlists and directories searched for named wordlists."""

    default_users: str | None = None
    default_passwords: str | None = None
    search_paths: list[str] = field(
        default_factory=lambda: [
            str(DEFAULT_CONFIG_DIR / "wordlists"),
            "/usr/share/wordlists",
            "/usr/share/seclists",
        ]
    )


@dataclass
class OutputSettings:
    """Where and how session results are persisted."""

    default_format: str = "json"
    save_results: bool = True
    results_dir: str = str(DEFAULT_CONFIG_DIR / "results")

    @property
    def results_path(self) -> Path:
        return Path(self.results_dir).expanduser()


@dataclass
class RedFoxConfig:
    """Effective configuration."""

    general: GeneralSettings = field(default_factory=GeneralSettings)
    scanning: ScanningSettings = field(default_factory=ScanningSettings)
    wordlists: WordlistSettings = field(default_factory=WordlistSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    source: Path | None = None
