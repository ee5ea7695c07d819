"""Reporting utilities for digitnet."""

from .artifacts import write_manifest
from .metrics import ConsoleProgress, CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = [
    "ConsoleProgress",
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "write_manifest",
    "write_summary",
]
