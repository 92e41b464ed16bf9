"""Reporting module for RedFox."""

from .generator import ReportFormat, render_report, report_filename, write_report
from .json_report import load_json_report, session_from_dict, session_to_dict
from .summary import build_summary

__all__ = [
    "ReportFormat",
    "build_summary",
    "load_json_report",
    "render_report",
    "report_filename",
    "session_from_dict",
    "session_to_dict",
    "write_report",
]
