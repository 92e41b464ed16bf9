"""XML report rendering."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import UTC, datetime

from redfox import __version__
from redfox.modules.results import AttemptOutcome, Session

from .summary import build_summary


def _text(parent: ET.Element, tag: str, value: object) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = "" if value is None else str(value)
    return element


def _outcome_element(parent: ET.Element, tag: str, outcome: AttemptOutcome) -> None:
    element = ET.SubElement(parent, tag, kind=outcome.kind.value)
    _text(element, "username", outcome.pair.username)
    _text(element, "password", outcome.pair.password)
    _text(element, "status-code", outcome.status_code)
    _text(element, "response-time-ms", f"{outcome.latency * 1000:.1f}")
    _text(element, "timestamp", outcome.timestamp.isoformat())
    if outcome.detail:
        _text(element, "detail", outcome.detail)


def render_xml(session: Session) -> str:
    summary = build_summary(session)
    root = ET.Element("redfox-report")

    metadata = ET.SubElement(root, "metadata")
    _text(metadata, "generated-at", datetime.now(UTC).isoformat())
    _text(metadata, "tool", "RedFoxTool")
    _text(metadata, "version", __version__)
    _text(metadata, "session-id", session.id)
    _text(metadata, "target", session.target.url)
    _text(metadata, "mode", session.mode.value)
    _text(metadata, "state", session.state.value)
    _text(metadata, "total-attempts", summary["attempted"])
    _text(metadata, "successful", summary["succeeded"])
    _text(metadata, "failed", summary["failed"])
    _text(metadata, "errored", summary["errored"])
    _text(metadata, "success-rate", f"{summary['success_rate']:.2f}")

    successes = ET.SubElement(root, "successful-results")
    failures = ET.SubElement(root, "failed-results")
    for outcome in session.outcomes:
        if outcome.success:
            _outcome_element(successes, "credential", outcome)
        else:
            _outcome_element(failures, "attempt", outcome)

    ET.indent(root)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True).decode("utf-8") + "\n"
