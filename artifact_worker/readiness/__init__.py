"""Sidecar readiness gate public API."""

from .gate import ReadinessGate

__all__ = ["ReadinessGate"]
