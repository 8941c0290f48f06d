"""Reporting Module - Console output for sweep results."""

from openstax_ingest.reporting.report import SweepReporter

__all__ = ["SweepReporter"]
