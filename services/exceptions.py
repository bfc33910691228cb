"""Error types raised by the earnings engine."""


class EarningsError(Exception):
    """Base class for all engine errors."""


class NotAuthenticated(EarningsError):
    """No active user context for a persistence-touching operation."""


class MissingSettings(EarningsError):
    """No settings record can be resolved and no bootstrap path was taken.

    Callers should run first-time setup or ``ensure_settings_for_week``.
    """


class ValidationError(EarningsError, ValueError):
    """Malformed input (negative amounts, bad tiers, out-of-range rates)."""


class IntervalConflict(EarningsError):
    """A settings write would break the non-overlapping interval invariant."""
