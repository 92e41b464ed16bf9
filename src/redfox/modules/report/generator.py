"""Report generation: format dispatch and file naming."""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path

from redfox.modules.results import Session

from .csv_report import render_csv
from .html_report import render_html
from .json_report import render_json
from .text_report import render_text
from .xml_report import render_xml

logger = logging.getLogger(__name__)


class ReportFormat(StrEnum):
    JSON = "json"
    HTML = "html"
    CSV = "csv"
    TXT = "txt"
    XML = "xml"


_RENDERERS = {
    ReportFormat.JSON: render_json,
    ReportFormat.HTML: render_html,
    ReportFormat.CSV: render_csv,
    ReportFormat.TXT: render_text,
    ReportFormat.XML: render_xml,
}


def report_filename(session: Session, fmt: ReportFormat | str) -> str:
    """``redfox_<YYYYmmdd_HHMMSS>_<id8>.<ext>``, stamped with the session start."""
    fmt = ReportFormat(fmt)
    stamp = (session.started_at or session.created_at).strftime("%Y%m%d_%H%M%S")
    return f"redfox_{stamp}_{session.id[:8]}.{fmt.value}"


def render_report(session: Session, fmt: ReportFormat | str = ReportFormat.JSON) -> bytes:
    """Render ``session`` in ``fmt``. Raises ValueError for unknown formats."""
    try:
        fmt = ReportFormat(fmt)
    except ValueError:
        raise ValueError(f"Unsupported format: {fmt}") from None
    return _RENDERERS[fmt](session).encode("utf-8")


def write_report(
    session: Session,
    report_dir: Path,
    fmt: ReportFormat | str = ReportFormat.JSON,
    filename: str | None = None,
) -> Path:
    """Render and write a report; returns the file path."""
    content = render_report(session, fmt)
    report_dir = Path(report_dir).expanduser()
    report_dir.mkdir(parents=True, exist_ok=True)
    report_file = report_dir / (filename or report_filename(session, fmt))
    report_file.write_bytes(content)
    logger.info("Report written to %s", report_file)
    return report_file
