"""Scan request: every parameter a session needs, serializable for resume."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

from redfox.config import RedFoxConfig
from redfox.modules.credentials import AttackMode, CandidateOrder, CredentialSource
from redfox.modules.executor import AuthMethod, ExecutorOptions
from redfox.modules.scheduler import RetryPolicy, SchedulerConfig, SuccessPolicy

# Fields that fall back to the configuration when left as None.
_CONFIG_DEFAULTS = {
    "threads": ("scanning", "threads"),
    "timeout": ("scanning", "timeout"),
    "max_retries": ("scanning", "max_retries"),
    "rate_limit": ("scanning", "rate_limit"),
    "burst": ("scanning", "burst"),
    "user_agent": ("scanning", "user_agent"),
    "verify_tls": ("scanning", "verify_tls"),
    "proxy": ("scanning", "proxy"),
    "max_consecutive_errors": ("scanning", "max_consecutive_errors"),
    "users": ("wordlists", "default_users"),
    "passwords": ("wordlists", "default_passwords"),
}


@dataclass
class ScanRequest:
    """Parameters for one scan, independent of the target it runs against."""

    mode: AttackMode = AttackMode.DICTIONARY
    users: str | None = None
    passwords: str | None = None
    combos: str | None = None
    separator: str = ":"
    order: CandidateOrder = CandidateOrder.USER_FIRST
    charset: str = "digits"
    min_length: int = 1
    max_length: int = 4
    suffixes: list[str] | None = None
    search_paths: list[str] = field(default_factory=list)

    auth_method: AuthMethod = AuthMethod.FORM
    username_field: str = "username"
    password_field: str = "password"
    extra_data: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    cookies: str | None = None
    success_match: str | None = None
    failure_match: str | None = None
    discover_form: bool = True
    user_agent: str = "RedFoxTool/1.0"
    verify_tls: bool = False
    proxy: str | None = None
    timeout: float = 30.0

    threads: int = 20
    rate_limit: float = 0.0
    burst: int = 1
    max_retries: int = 3
    success_policy: SuccessPolicy = SuccessPolicy.EXHAUSTIVE
    max_time: float | None = None
    max_consecutive_errors: int = 10
    resume_offset: int = 0

    @classmethod
    def from_config(cls, config: RedFoxConfig, **options: Any) -> ScanRequest:
        """Build a request where options left as None take configured values."""
        values = {key: value for key, value in options.items() if value is not None}
        for name, (section, key) in _CONFIG_DEFAULTS.items():
            if name not in values:
                configured = getattr(getattr(config, section), key)
                if configured is not None:
                    values[name] = configured
        if "search_paths" not in values:
            values["search_paths"] = list(config.wordlists.search_paths)
        return cls(**values)

    def build_source(self) -> CredentialSource:
        return CredentialSource.from_inputs(
            self.mode,
            user_input=self.users,
            password_input=self.passwords,
            combo_input=self.combos,
            search_paths=self.search_paths,
            order=self.order,
            charset=self.charset,
            min_length=self.min_length,
            max_length=self.max_length,
            suffixes=self.suffixes,
            separator=self.separator,
        )

    def executor_options(self) -> ExecutorOptions:
        return ExecutorOptions(
            auth_method=self.auth_method,
            username_field=self.username_field,
            password_field=self.password_field,
            extra_data=dict(self.extra_data),
            headers=dict(self.headers),
            cookies=self.cookies,
            timeout=self.timeout,
            user_agent=self.user_agent,
            proxy=self.proxy,
            success_match=self.success_match,
            failure_match=self.failure_match,
            discover_form=self.discover_form,
            max_connections=self.threads,
        )

    def scheduler_config(self) -> SchedulerConfig:
        return SchedulerConfig(
            workers=self.threads,
            rate_limit=self.rate_limit,
            burst=self.burst,
            retry=RetryPolicy(max_retries=self.max_retries),
            success_policy=self.success_policy,
            max_time=self.max_time,
            max_consecutive_errors=self.max_consecutive_errors,
        )

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanRequest:
        known = {f.name for f in dataclasses.fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        for name, enum in (
            ("mode", AttackMode),
            ("order", CandidateOrder),
            ("auth_method", AuthMethod),
            ("success_policy", SuccessPolicy),
        ):
            if name in values:
                values[name] = enum(values[name])
        return cls(**values)
