"""Test configuration and fixtures for RedFox."""

import tempfile
from collections.abc import Generator
from pathlib import Path
from urllib.parse import parse_qsl

import httpx
import pytest

from redfox.modules.credentials import AttackMode, CredentialPair
from redfox.modules.results import AttemptOutcome, OutcomeKind, Session, SessionState
from redfox.modules.target import Target

LOGIN_URL = "http://target.test/login"

LOGIN_PAGE = """
<html><body>
<form action="/login" method="POST">
    <input type="hidden" name="csrf_token" value="tok123" />
    <input name="username" type="text" />
    <input name="password" type="password" />
    <button>Sign in</button>
</form>
</body></html>
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def redfox_home(temp_dir: Path, monkeypatch) -> Path:
    """Point config and results at a temp dir so tests never touch ~/.redfox."""
    home = temp_dir / "redfox_home"
    home.mkdir()
    monkeypatch.setenv("REDFOX_CONFIG", str(home / "config.yml"))
    monkeypatch.setenv("REDFOX_RESULTS_DIR", str(home / "results"))
    for name in ("REDFOX_THREADS", "REDFOX_RATE_LIMIT", "REDFOX_TIMEOUT", "REDFOX_MAX_RETRIES"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def users_file(temp_dir: Path) -> Path:
    path = temp_dir / "users.txt"
    path.write_text("admin\nroot\n", encoding="utf-8")
    return path


@pytest.fixture
def passwords_file(temp_dir: Path) -> Path:
    path = temp_dir / "passwords.txt"
    path.write_text("# common\n123456\nadmin\n", encoding="utf-8")
    return path


@pytest.fixture
def target() -> Target:
    return Target(scheme="http", host="target.test", port=80, path="/login")


def login_handler(valid: set[tuple[str, str]]):
    """respx side effect: redirect to the dashboard for valid pairs."""

    def handler(request: httpx.Request) -> httpx.Response:
        form = dict(parse_qsl(request.content.decode()))
        if (form.get("username"), form.get("password")) in valid:
            return httpx.Response(302, headers={"Location": "/dashboard"})
        return httpx.Response(200, text="<p>Invalid credentials</p>" + LOGIN_PAGE)

    return handler


@pytest.fixture
def sample_session(target: Target) -> Session:
    """A finished session with one success and two failures."""
    session = Session(target=target, mode=AttackMode.DICTIONARY, total_candidates=3)
    session.transition(SessionState.RUNNING)
    session.outcomes = [
        AttemptOutcome(
            CredentialPair("admin", "admin", "dictionary:passwords.txt"),
            OutcomeKind.SUCCESS,
            latency=0.012,
            status_code=302,
            detail="HTTP 302",
            metadata={"location": "/dashboard", "content_length": 0},
        ),
        AttemptOutcome(
            CredentialPair("admin", "123456", "dictionary:passwords.txt"),
            OutcomeKind.INVALID,
            latency=0.02,
            status_code=200,
            detail="HTTP 200",
        ),
        AttemptOutcome(
            CredentialPair("root", "admin", "dictionary:passwords.txt"),
            OutcomeKind.NETWORK_ERROR,
            latency=0.5,
            detail="Connection failed: refused",
            retries=3,
        ),
    ]
    session.resume_offset = 3
    session.transition(SessionState.COMPLETED)
    return session
