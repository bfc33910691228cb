"""Shift resolver: weekly morning/afternoon rotation."""

from typing import Optional, Union

from services.models import Shift
from time_utils import DateLike, weeks_between

SHIFT_HOURS = {
    Shift.MORNING: "09:00 - 17:00",
    Shift.AFTERNOON: "12:00 - 20:00",
}


def resolve_shift(
    reference_date: DateLike,
    pattern_start: DateLike,
    manual_override: Optional[Union[Shift, str]] = None
) -> Shift:
    """Determine the active shift for the week containing ``reference_date``.

    Week 0 of the pattern is morning, week 1 afternoon, and so on. Week
    distance is unsigned, so references before ``pattern_start`` still
    resolve.

    Args:
        reference_date: Date to resolve the shift for
        pattern_start: Any date in the first (morning) week of the rotation
        manual_override: Shift that wins over the rotation when set

    Returns:
        Resolved Shift
    """
    if manual_override:
        return Shift(manual_override)

    weeks_since = weeks_between(pattern_start, reference_date)
    return Shift.MORNING if weeks_since % 2 == 0 else Shift.AFTERNOON


def shift_after_weeks(shift: Optional[Shift], weeks: int) -> Optional[Shift]:
    """Advance a shift override through ``weeks`` rotations (None stays None)."""
    if shift is None:
        return None
    return shift.opposite() if weeks % 2 else shift
