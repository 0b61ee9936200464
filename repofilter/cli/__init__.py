"""Command-line interface for repofilter (``repofilter``)."""

from __future__ import annotations

from .main import cli

__all__ = ["cli"]
