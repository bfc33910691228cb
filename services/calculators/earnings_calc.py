"""Weekly earnings aggregation."""

from decimal import Decimal
from typing import Any, Iterable

from services.models import Job, to_decimal


def week_revenue(jobs: Iterable[Job]) -> Decimal:
    """Sum job amounts (tips excluded)."""
    return sum((to_decimal(job.amount) for job in jobs), Decimal("0"))


def week_tips(jobs: Iterable[Job]) -> Decimal:
    """Sum job tips."""
    return sum((to_decimal(job.tip_amount) for job in jobs), Decimal("0"))


def total_pocket(commission_total: Any, fixed_bonus: Any, tips: Any) -> Decimal:
    """Money the stylist takes home: commission + fixed bonus + tips."""
    return to_decimal(commission_total) + to_decimal(fixed_bonus) + to_decimal(tips)


def is_target_met(revenue: Any, target: Any) -> bool:
    return to_decimal(revenue) >= to_decimal(target)


def target_progress(revenue: Any, target: Any) -> Decimal:
    """Fraction of the weekly target reached (0 when no target is set)."""
    target = to_decimal(target)
    if target <= 0:
        return Decimal("0")
    return to_decimal(revenue) / target
