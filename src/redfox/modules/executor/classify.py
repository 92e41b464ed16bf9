"""Response and exception classification."""

from __future__ import annotations

import httpx

from redfox.errors import (
    AttemptTimeoutError,
    InputError,
    NetworkError,
    PermanentNetworkError,
    RedFoxError,
    TransientNetworkError,
)

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "no address associated",
    "name resolution",
)
_TLS_MARKERS = ("certificate", "ssl", "tls", "handshake")

SUCCESS_INDICATORS = (
    "logout",
    "log out",
    "sign out",
    "sign off",
    "dashboard",
    "welcome",
    "my account",
    "profile",
    "settings",
    "control panel",
)

FAILURE_PHRASES = (
    "access denied",
    "login failed",
    "incorrect password",
    "invalid credentials",
    "invalid username",
    "invalid password",
    "invalid login",
    "authentication failed",
    "wrong password",
    "wrong credentials",
    "cannot log in",
    "unable to log in",
    "login error",
    "unauthorized",
)

_FAILURE_LOCATION_MARKERS = ("login", "signin", "sign-in", "error", "fail", "denied")

# Exceptions an attempt can raise from the network; anything else is a bug.
NETWORK_EXCEPTIONS: tuple[type[BaseException], ...] = (httpx.HTTPError, httpx.InvalidURL, OSError)


def classify_exception(exc: BaseException) -> RedFoxError:
    """Map an httpx (or asyncio) exception onto the RedFox error taxonomy.

    ``exc`` is a RedFoxError or one of NETWORK_EXCEPTIONS. A connect timeout
    counts as a network error: no connection was opened.
    """
    if isinstance(exc, RedFoxError):
        return exc
    if isinstance(exc, httpx.ConnectTimeout):
        return TransientNetworkError(f"Connect timeout: {str(exc) or 'no connection'}")
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return AttemptTimeoutError(str(exc) or "attempt timed out")
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return InputError(f"Invalid request URL: {exc}")

    message = str(exc) or type(exc).__name__
    lowered = message.lower()
    if isinstance(exc, httpx.ConnectError):
        if any(marker in lowered for marker in _DNS_MARKERS):
            return PermanentNetworkError(f"DNS failure: {message}")
        if any(marker in lowered for marker in _TLS_MARKERS):
            return PermanentNetworkError(f"TLS failure: {message}")
        return TransientNetworkError(f"Connection failed: {message}")
    if isinstance(exc, httpx.ProxyError):
        return PermanentNetworkError(f"Proxy failure: {message}")
    if isinstance(exc, (httpx.TransportError, OSError)):
        return TransientNetworkError(f"Transport error: {message}")
    return NetworkError(message)


def redirect_is_success(location: str) -> bool:
    """A redirect means success unless it points back at a login or error page."""
    lowered = location.lower()
    return not any(marker in lowered for marker in _FAILURE_LOCATION_MARKERS)


def is_login_successful(
    response: httpx.Response,
    password_field: str = "",
    success_match: str | None = None,
    failure_match: str | None = None,
) -> bool:
    """Determine if a form login was successful from the response.

    Checks, in order:
    1. User-supplied success/failure text (definitive when given)
    2. Redirects: success unless the Location points back to login/error
    3. Specific failure *phrases* in the body
    4. Success indicators in the body
    5. Login-form re-presence: the password field is still on the page
    6. 2xx status as a last resort
    """
    text = response.text
    if success_match is not None:
        return success_match in text
    if failure_match is not None:
        return failure_match not in text

    if response.is_redirect:
        return redirect_is_success(response.headers.get("location", ""))

    text_lower = text.lower()
    if any(phrase in text_lower for phrase in FAILURE_PHRASES):
        return False
    if any(ind in text_lower for ind in SUCCESS_INDICATORS):
        return True

    if password_field:
        pw_lower = password_field.lower()
        if f'name="{pw_lower}"' in text_lower or f"name='{pw_lower}'" in text_lower:
            return False
        return response.is_success

    return False
