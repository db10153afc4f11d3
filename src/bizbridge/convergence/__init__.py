"""Primary-first reads with legacy fallback."""

from .resolver import ReadMode, ReadOutcome, ReadSource, SourceConvergenceResolver, should_fall_back

__all__ = ["ReadMode", "ReadOutcome", "ReadSource", "SourceConvergenceResolver", "should_fall_back"]
