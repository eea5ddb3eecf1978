"""Terminal rendering of release pipeline results."""

from nimrelease.monitor.renderer import ReportRenderer

__all__ = ["ReportRenderer"]
