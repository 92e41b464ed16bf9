"""HTML report rendering with Jinja2."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from redfox import __version__
from redfox.modules.results import Session

from .summary import build_summary

TEMPLATE_DIR = Path(__file__).parent / "templates"
MAX_FAILED_ROWS = 200

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_html(session: Session) -> str:
    failures = [o for o in session.outcomes if not o.success]
    template = _env.get_template("session.html")
    return template.render(
        session=session,
        summary=build_summary(session),
        successes=session.successes,
        failures=failures[:MAX_FAILED_ROWS],
        hidden_failures=max(len(failures) - MAX_FAILED_ROWS, 0),
        version=__version__,
        generated_at=datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S UTC"),
    )
