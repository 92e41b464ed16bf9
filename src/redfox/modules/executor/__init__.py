"""Attempt executor and response classification."""

from .classify import classify_exception, is_login_successful
from .executor import AttemptExecutor, AuthMethod, ExecutorOptions
from .form import LoginForm, discover_login_form
from .signals import ThrottleSignal, detect_throttling, parse_retry_after

__all__ = [
    "AttemptExecutor",
    "AuthMethod",
    "ExecutorOptions",
    "LoginForm",
    "ThrottleSignal",
    "classify_exception",
    "detect_throttling",
    "discover_login_form",
    "is_login_successful",
    "parse_retry_after",
]
