"""Commission calculator - single source of truth for commission calculations."""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from config import Config
from services.exceptions import ValidationError
from services.models import BonusTier, to_decimal
from services.validators import parse_tiers

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class CommissionResult:
    """Result of commission calculation."""

    base_commission: Decimal  # revenue * base rate
    streak_bonus: Decimal  # revenue * streak rate * effective streak
    total_commission: Decimal  # base + streak bonus
    effective_streak: int  # streak count after the cap

    def get_breakdown_string(self) -> str:
        """Get formatted breakdown string for display.

        Returns:
            String like '60000.00 (48000.00 base + 12000.00 streak x2)'
        """
        parts = [f"{self.base_commission:.2f} base"]

        if self.streak_bonus > 0:
            parts.append(f"{self.streak_bonus:.2f} streak x{self.effective_streak}")

        return f"{self.total_commission:.2f} ({' + '.join(parts)})"


class CommissionCalculator:
    """Single source of truth for commission calculations.

    Rates are decimals (0.40 = 40%). Missing rates count as 0: the
    result is a display figure, not a ledger entry.
    """

    MAX_STREAK_WEEKS = Config.MAX_STREAK_WEEKS

    def calculate(
        self,
        revenue: Any,
        settings: Any,
        streak_count: int = 0
    ) -> CommissionResult:
        """Calculate base commission and streak bonus.

        Args:
            revenue: Weekly revenue (tips excluded)
            settings: SettingsSnapshot (or mapping) with base_commission_rate
                      and streak_bonus_rate; None means all rates are 0
            streak_count: Consecutive weeks the streak threshold was met

        Returns:
            CommissionResult
        """
        revenue = self._revenue(revenue)
        if isinstance(streak_count, bool) or not isinstance(streak_count, int) or streak_count < 0:
            raise ValidationError(f"streak_count must be a non-negative integer, got {streak_count!r}")

        base_rate = self._rate(settings, "base_commission_rate")
        streak_rate = self._rate(settings, "streak_bonus_rate")

        # Streak bonus stacks up to MAX_STREAK_WEEKS
        effective_streak = min(streak_count, self.MAX_STREAK_WEEKS)

        base_commission = revenue * base_rate
        streak_bonus = revenue * streak_rate * effective_streak
        total_commission = base_commission + streak_bonus

        logger.debug(
            f"Commission for revenue {revenue}: base {base_commission} "
            f"+ streak {streak_bonus} (x{effective_streak})"
        )

        return CommissionResult(
            base_commission=base_commission,
            streak_bonus=streak_bonus,
            total_commission=total_commission,
            effective_streak=effective_streak
        )

    def calculate_fixed_bonus(self, revenue: Any, tiers: Optional[Iterable[Any]]) -> Decimal:
        """Get the bonus of the single highest tier reached.

        Tiers never stack: revenue 250 with tiers at 100/200/300 pays the
        200 tier only.

        Args:
            revenue: Weekly revenue
            tiers: BonusTier objects or {threshold, bonus} dicts, any order

        Returns:
            Bonus amount, 0 if no tier is reached
        """
        revenue = self._revenue(revenue)

        reached = [tier for tier in parse_tiers(tiers) if revenue >= tier.threshold]
        if not reached:
            return ZERO
        return reached[-1].bonus

    def get_next_bonus_tier(self, revenue: Any, tiers: Optional[Iterable[Any]]) -> Optional[BonusTier]:
        """Get the lowest tier strictly above revenue, or None when all are cleared."""
        revenue = self._revenue(revenue)

        for tier in parse_tiers(tiers):
            if revenue < tier.threshold:
                return tier
        return None

    def get_remaining_to_next_bonus(self, revenue: Any, tiers: Optional[Iterable[Any]]) -> Optional[Decimal]:
        """Get the revenue still needed for the next tier, or None."""
        next_tier = self.get_next_bonus_tier(revenue, tiers)
        if next_tier is None:
            return None
        return next_tier.threshold - self._revenue(revenue)

    @staticmethod
    def _revenue(revenue: Any) -> Decimal:
        try:
            value = to_decimal(revenue)
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError(f"Revenue must be a number, got {revenue!r}")
        if not value.is_finite() or value < 0:
            raise ValidationError(f"Revenue must be a finite amount >= 0, got {revenue!r}")
        return value

    @staticmethod
    def _rate(settings: Any, name: str) -> Decimal:
        if settings is None:
            return ZERO
        if isinstance(settings, dict):
            value = settings.get(name)
        else:
            value = getattr(settings, name, None)
        try:
            return to_decimal(value)
        except (InvalidOperation, ValueError, TypeError):
            logger.warning(f"Ignoring malformed {name}: {value!r}")
            return ZERO
