"""Domain models shared by repositories, calculators and services."""

from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """Coerce a number-like value to Decimal, mapping None to ``default``."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class Shift(str, Enum):
    """Work period; rotates weekly unless manually overridden."""

    MORNING = "morning"
    AFTERNOON = "afternoon"

    def opposite(self) -> "Shift":
        return Shift.AFTERNOON if self is Shift.MORNING else Shift.MORNING


class ClientStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    BAD = "bad"


@dataclass(frozen=True)
class BonusTier:
    """Reach ``threshold`` weekly revenue to earn ``bonus`` once."""

    threshold: Decimal
    bonus: Decimal

    @classmethod
    def from_dict(cls, data: Dict) -> "BonusTier":
        return cls(threshold=to_decimal(data["threshold"]), bonus=to_decimal(data["bonus"]))

    def to_dict(self) -> Dict[str, float]:
        # JSONB storage
        return {"threshold": float(self.threshold), "bonus": float(self.bonus)}


@dataclass
class Client:
    name: str
    user_id: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    status: ClientStatus = ClientStatus.GOOD
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Job:
    """A single service performed for a (possibly unknown) client."""

    amount: Decimal
    date: date
    tip_amount: Decimal = Decimal("0")
    description: Optional[str] = None
    rating: Optional[int] = None
    tags: List[str] = field(default_factory=list)
    client_id: Optional[str] = None
    photos: Optional[List[str]] = None
    user_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class SettingsSnapshot:
    """Commission parameters valid for [effective_from, effective_to).

    ``effective_to`` of None marks the open (currently active) record.
    """

    effective_from: date
    weekly_target: Decimal
    base_commission_rate: Decimal
    streak_bonus_rate: Decimal
    streak_bonus_threshold: Decimal = Decimal("0")
    fixed_bonus_tiers: List[BonusTier] = field(default_factory=list)
    streak_threshold_met: bool = False
    current_shift: Optional[Shift] = None
    shift_pattern_start: Optional[date] = None
    effective_to: Optional[date] = None
    user_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.effective_to is None

    def covers(self, week_start: date) -> bool:
        """Check whether this record is in force for the week starting ``week_start``."""
        if self.effective_from > week_start:
            return False
        return self.effective_to is None or week_start < self.effective_to

    def sorted_tiers(self) -> List[BonusTier]:
        return sorted(self.fixed_bonus_tiers, key=lambda t: t.threshold)

    def settings_fields(self) -> Dict[str, Any]:
        """Get the copyable commission fields (no identity, interval or flag)."""
        return {name: getattr(self, name) for name in SETTINGS_FIELDS}

    def with_changes(self, **changes) -> "SettingsSnapshot":
        return replace(self, **changes)


# Fields a settings patch may touch
SETTINGS_FIELDS = (
    "weekly_target",
    "base_commission_rate",
    "streak_bonus_rate",
    "streak_bonus_threshold",
    "fixed_bonus_tiers",
    "current_shift",
    "shift_pattern_start",
)

# Fields that belong to the versioning machinery, never to a patch
PROTECTED_SETTINGS_FIELDS = frozenset(
    f.name for f in fields(SettingsSnapshot)
) - frozenset(SETTINGS_FIELDS) - {"streak_threshold_met"}

JOB_FIELDS = ("amount", "tip_amount", "date", "description", "rating", "tags", "client_id", "photos")
CLIENT_FIELDS = ("name", "phone", "notes", "status")
