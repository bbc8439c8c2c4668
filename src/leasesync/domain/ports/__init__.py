"""Domain port definitions for adapters."""

from __future__ import annotations

from .source import LeaseSource
from .target import RelationshipGraph

__all__ = ["LeaseSource", "RelationshipGraph"]
