"""Responsive breakpoints for masonry configuration values."""

from collections.abc import Mapping

# Smallest to largest; each breakpoint starts at its threshold (inclusive).
BREAKPOINT_THRESHOLDS = (
    ('xs', 0),
    ('sm', 576),
    ('md', 768),
    ('lg', 992),
    ('xl', 1200),
)

BREAKPOINTS = tuple(name for name, _ in BREAKPOINT_THRESHOLDS)


def width_to_breakpoint(width: float) -> str:
    """Return the name of the breakpoint bucket containing `width`."""
    for name, threshold in reversed(BREAKPOINT_THRESHOLDS):
        if width >= threshold:
            return name
    return 'xs'


def resolve_breakpoint_value(value, breakpoint: str | None):
    """
    Resolve a scalar or per-breakpoint configuration value.

    Plain scalars are returned unchanged. For a mapping, the breakpoints from
    `breakpoint` down to `xs` are checked in turn and the first defined entry
    wins, so a value set for a small breakpoint also applies to every larger
    one until overridden. Returns None when nothing at or below the
    breakpoint is defined.
    """
    if not isinstance(value, Mapping):
        return value
    if breakpoint not in BREAKPOINTS:
        return None
    for name in reversed(BREAKPOINTS[:BREAKPOINTS.index(breakpoint) + 1]):
        resolved = value.get(name)
        if resolved is not None:
            return resolved
    return None
