"""Attempt executor: one authentication attempt per call."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import httpx

from redfox.errors import (
    AttemptTimeoutError,
    InputError,
    NetworkError,
    RateLimitedError,
    RedFoxError,
)
from redfox.modules.credentials import CredentialPair
from redfox.modules.results import AttemptOutcome, OutcomeKind
from redfox.modules.target import Target

from .classify import NETWORK_EXCEPTIONS, classify_exception, is_login_successful
from .form import LoginForm, discover_login_form
from .signals import detect_throttling

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

# Hard cap on top of the per-phase httpx timeouts.
DEADLINE_GRACE = 1.0


class AuthMethod(StrEnum):
    """How credentials are presented to the target."""

    FORM = "form"
    JSON = "json"
    BASIC = "basic"


@dataclass(frozen=True)
class ExecutorOptions:
    """Per-session attempt settings; read-only once the session starts."""

    auth_method: AuthMethod = AuthMethod.FORM
    username_field: str = "username"
    password_field: str = "password"
    extra_data: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    cookies: str | None = None
    timeout: float = 30.0
    user_agent: str = "RedFoxTool/1.0"
    proxy: str | None = None
    success_match: str | None = None
    failure_match: str | None = None
    discover_form: bool = True
    max_connections: int = 20


class _SharedTransport(httpx.AsyncBaseTransport):
    """Shares one connection pool between per-attempt clients.

    Closing a per-attempt client must not close the pool, so ``aclose`` is a
    no-op here and the executor closes the inner transport itself.
    """

    def __init__(self, inner: httpx.AsyncBaseTransport):
        self.inner = inner

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self.inner.handle_async_request(request)

    async def aclose(self) -> None:
        return None


class AttemptExecutor:
    """Performs and classifies single authentication attempts.

    Each attempt runs in its own client over the shared connection pool. Its
    cookie jar is a copy of the preflight cookies, so cookies set during one
    attempt never reach another.
    """

    def __init__(
        self,
        target: Target,
        options: ExecutorOptions | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.target = target
        self.options = options or ExecutorOptions()
        self._owns_transport = transport is None
        self._inner = transport or httpx.AsyncHTTPTransport(
            verify=target.verify_tls,
            proxy=self.options.proxy,
            limits=httpx.Limits(
                max_connections=self.options.max_connections,
                max_keepalive_connections=self.options.max_connections,
            ),
        )
        self._transport = _SharedTransport(self._inner)
        self._cookies = httpx.Cookies(parse_cookie_header(self.options.cookies))
        self.form: LoginForm | None = None

    async def __aenter__(self) -> AttemptExecutor:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport:
            await self._inner.aclose()

    def _client(self) -> httpx.AsyncClient:
        headers = {**DEFAULT_HEADERS, "User-Agent": self.options.user_agent, **self.options.headers}
        return httpx.AsyncClient(
            transport=self._transport,
            headers=headers,
            cookies=self._cookies,
            timeout=self.options.timeout,
            follow_redirects=False,
        )

    async def prepare(self) -> None:
        """Preflight GET: connectivity check and, for forms, field discovery.

        Cookies set by the login page (the session a CSRF token belongs to)
        are carried into every attempt's own jar.

        Raises NetworkError (or InputError) when the target cannot be reached.
        """
        try:
            async with self._client() as client:
                response = await asyncio.wait_for(
                    client.get(self.target.url), timeout=self.options.timeout + DEADLINE_GRACE
                )
                self._cookies = httpx.Cookies(client.cookies)
        except NETWORK_EXCEPTIONS as exc:
            raise classify_exception(exc) from exc

        logger.info("Preflight %s -> HTTP %d", self.target.url, response.status_code)
        if self.options.auth_method is not AuthMethod.FORM or not self.options.discover_form:
            return

        form = discover_login_form(response.text, str(response.url))
        if form is None:
            logger.info(
                "No login form detected; posting %s/%s to %s",
                self.options.username_field,
                self.options.password_field,
                self.target.url,
            )
            return
        self.form = form
        logger.info(
            "Login form: action=%s user=%s password=%s hidden=%s",
            form.action,
            form.username_field,
            form.password_field,
            ", ".join(form.hidden_fields) or "-",
        )

    def _password_field(self) -> str:
        return self.form.password_field if self.form else self.options.password_field

    def _build_request(self, client: httpx.AsyncClient, pair: CredentialPair) -> httpx.Request:
        method = self.options.auth_method
        if method is AuthMethod.BASIC:
            return client.build_request("GET", self.target.url)

        if self.form is not None:
            url = self.form.action
            data: dict[str, Any] = {
                **self.form.hidden_fields,
                **self.options.extra_data,
                self.form.username_field: pair.username,
                self.form.password_field: pair.password,
            }
        else:
            url = self.target.url
            data = {
                **self.options.extra_data,
                self.options.username_field: pair.username,
                self.options.password_field: pair.password,
            }
        if method is AuthMethod.JSON:
            return client.build_request("POST", url, json=data)
        return client.build_request("POST", url, data=data)

    async def _send(self, pair: CredentialPair) -> httpx.Response:
        async with self._client() as client:
            request = self._build_request(client, pair)
            auth = None
            if self.options.auth_method is AuthMethod.BASIC:
                auth = httpx.BasicAuth(pair.username, pair.password)
            response = await client.send(request, auth=auth)
            await response.aread()
            return response

    async def attempt(self, pair: CredentialPair) -> AttemptOutcome:
        """Perform one attempt and classify it.

        Network failures become outcomes; any other exception is a bug and
        propagates.
        """
        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self._send(pair), timeout=self.options.timeout + DEADLINE_GRACE
            )
        except NETWORK_EXCEPTIONS as exc:
            return self._error_outcome(pair, classify_exception(exc), start)
        kind, detail = self._classify_response(response)

        metadata: dict[str, Any] = {"content_length": len(response.content)}
        if location := response.headers.get("location"):
            metadata["location"] = location
        if kind is OutcomeKind.RATE_LIMITED:
            signal = detect_throttling(
                response.text, status_code=response.status_code, headers=response.headers
            )
            if signal is not None and signal.retry_after is not None:
                metadata["retry_after"] = signal.retry_after
        return self._outcome(
            pair,
            kind,
            start,
            detail,
            status_code=response.status_code,
            metadata=metadata,
        )

    def _classify_response(self, response: httpx.Response) -> tuple[OutcomeKind, str]:
        signal = detect_throttling(
            response.text, status_code=response.status_code, headers=response.headers
        )
        if signal is not None:
            return OutcomeKind.RATE_LIMITED, signal.message
        if response.status_code >= 500:
            return OutcomeKind.NETWORK_ERROR, f"Server error HTTP {response.status_code}"

        method = self.options.auth_method
        if method is not AuthMethod.FORM and self.options.success_match is None:
            if self.options.failure_match is None:
                if response.status_code in (401, 403):
                    return OutcomeKind.INVALID, f"HTTP {response.status_code}"
                if response.is_success:
                    return OutcomeKind.SUCCESS, f"HTTP {response.status_code}"

        if is_login_successful(
            response,
            self._password_field(),
            self.options.success_match,
            self.options.failure_match,
        ):
            return OutcomeKind.SUCCESS, f"HTTP {response.status_code}"
        return OutcomeKind.INVALID, f"HTTP {response.status_code}"

    def _error_outcome(self, pair: CredentialPair, error: RedFoxError, start: float) -> AttemptOutcome:
        if isinstance(error, AttemptTimeoutError):
            return self._outcome(pair, OutcomeKind.TIMEOUT, start, str(error))
        if isinstance(error, RateLimitedError):
            return self._outcome(pair, OutcomeKind.RATE_LIMITED, start, str(error))
        fatal = isinstance(error, InputError) or (
            isinstance(error, NetworkError) and not error.transient
        )
        return self._outcome(pair, OutcomeKind.NETWORK_ERROR, start, str(error), fatal=fatal)

    def _outcome(
        self,
        pair: CredentialPair,
        kind: OutcomeKind,
        start: float,
        detail: str = "",
        *,
        status_code: int | None = None,
        fatal: bool = False,
        metadata: dict[str, Any] | None = None,
    ) -> AttemptOutcome:
        return AttemptOutcome(
            pair=pair,
            kind=kind,
            latency=time.perf_counter() - start,
            status_code=status_code,
            detail=detail,
            fatal=fatal,
            metadata=metadata or {},
        )


def parse_cookie_header(value: str | None) -> dict[str, str]:
    """Split a ``name=value; name2=value2`` header into a mapping."""
    cookies: dict[str, str] = {}
    for part in (value or "").split(";"):
        name, sep, item = part.strip().partition("=")
        if sep and name:
            cookies[name.strip()] = item.strip()
    return cookies
