"""Input validation for jobs, clients and settings patches.

Each ``normalize_*`` function returns a new dict with coerced values
(Decimal money, date objects, enums) or raises ValidationError.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from services.exceptions import ValidationError
from services.models import (
    BonusTier, ClientStatus, Shift, to_decimal,
    SETTINGS_FIELDS, PROTECTED_SETTINGS_FIELDS, JOB_FIELDS, CLIENT_FIELDS,
)
from time_utils import parse_date

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _money(name: str, value: Any) -> Decimal:
    try:
        amount = to_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"{name} must be finite, got {value!r}")
    if amount < 0:
        raise ValidationError(f"{name} must be >= 0, got {amount}")
    return amount


def _rate(name: str, value: Any) -> Decimal:
    rate = _money(name, value)
    if rate > 1:
        raise ValidationError(f"{name} must be a decimal between 0 and 1 (0.40 = 40%), got {rate}")
    return rate


def _unknown_keys(patch: Dict, allowed: Iterable[str]) -> None:
    unknown = sorted(set(patch) - set(allowed))
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(unknown)}")


def parse_tiers(raw: Optional[Iterable[Any]]) -> List[BonusTier]:
    """Parse a tier list of BonusTier objects or {threshold, bonus} dicts.

    Returns:
        Tiers sorted by ascending threshold.
    """
    if raw is None:
        return []
    if isinstance(raw, (str, bytes, dict)):
        raise ValidationError("fixed_bonus_tiers must be a list of {threshold, bonus}")

    tiers = []
    for i, item in enumerate(raw):
        if isinstance(item, BonusTier):
            threshold, bonus = item.threshold, item.bonus
        elif isinstance(item, dict) and "threshold" in item and "bonus" in item:
            threshold, bonus = item["threshold"], item["bonus"]
        else:
            raise ValidationError(f"Bonus tier #{i} is malformed: {item!r}")
        tiers.append(BonusTier(
            threshold=_money(f"tier #{i} threshold", threshold),
            bonus=_money(f"tier #{i} bonus", bonus),
        ))

    return sorted(tiers, key=lambda t: t.threshold)


def parse_shift(value: Any) -> Optional[Shift]:
    if value is None or value == "":
        return None
    try:
        return Shift(value)
    except ValueError:
        raise ValidationError(f"Shift must be 'morning', 'afternoon' or empty, got {value!r}")


def normalize_settings_patch(patch: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a settings patch.

    Interval and identity fields (effective_from, effective_to, id, user_id)
    are owned by the versioning manager and rejected here.
    """
    protected = sorted(set(patch) & PROTECTED_SETTINGS_FIELDS)
    if protected:
        raise ValidationError(f"Fields cannot be patched: {', '.join(protected)}")
    _unknown_keys(patch, SETTINGS_FIELDS)

    result = {}
    for name, value in patch.items():
        if name in ("base_commission_rate", "streak_bonus_rate"):
            result[name] = _rate(name, value)
        elif name in ("weekly_target", "streak_bonus_threshold"):
            result[name] = _money(name, value)
        elif name == "fixed_bonus_tiers":
            result[name] = parse_tiers(value)
        elif name == "current_shift":
            result[name] = parse_shift(value)
        elif name == "shift_pattern_start":
            result[name] = parse_date(value) if value else None
    return result


def normalize_job(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Validate job fields.

    Args:
        data: Job fields
        partial: True for updates (only present fields are checked)

    Returns:
        Normalized fields
    """
    _unknown_keys(data, JOB_FIELDS)
    if not partial:
        missing = [name for name in ("amount", "date") if data.get(name) is None]
        if missing:
            raise ValidationError(f"Missing required job fields: {', '.join(missing)}")

    result = dict(data)
    if "amount" in data:
        result["amount"] = _money("amount", data["amount"])
    if "tip_amount" in data or not partial:
        result["tip_amount"] = _money("tip_amount", data.get("tip_amount") or 0)
    if "date" in data:
        try:
            result["date"] = parse_date(data["date"])
        except (ValueError, AttributeError):
            raise ValidationError(f"Invalid job date: {data['date']!r}")
    if data.get("rating") is not None:
        rating = data["rating"]
        if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(f"rating must be an integer {MIN_RATING}-{MAX_RATING}, got {rating!r}")
    if "tags" in data or not partial:
        tags = data.get("tags") or []
        if isinstance(tags, str) or not all(isinstance(t, str) for t in tags):
            raise ValidationError("tags must be a list of strings")
        result["tags"] = [t.strip() for t in tags if t.strip()]
    return result


def normalize_client(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Validate client fields."""
    _unknown_keys(data, CLIENT_FIELDS)

    result = dict(data)
    if "name" in data or not partial:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Client name is required")
        result["name"] = name
    if "status" in data and data["status"] is None:
        result.pop("status")
    elif "status" in data:
        try:
            result["status"] = ClientStatus(data["status"])
        except ValueError:
            raise ValidationError(f"Client status must be good, warning or bad, got {data['status']!r}")
    return result
