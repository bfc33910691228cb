#!/usr/bin/env python3
"""Print the earnings summary of one business week.

Usage:
    python3 scripts/week_summary.py --user USER_ID [--week YYYY-MM-DD] [--backend postgres|memory]
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import Config
from services.context import create_app_context
from services.exceptions import EarningsError
from services.shifts import SHIFT_HOURS
from time_utils import format_week_range, parse_date, today_local

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def print_summary(summary) -> None:
    settings = summary.settings
    print(f"\n{'=' * 60}")
    print(f"WEEK {format_week_range(summary.week.start, summary.week.end)}")
    print(f"{'=' * 60}")
    print(f"Shift:        {summary.shift.value} ({SHIFT_HOURS[summary.shift]})")
    print(f"Jobs:         {summary.job_count}")
    print(f"Revenue:      {summary.revenue:,.2f} / target {settings.weekly_target:,.2f} "
          f"({summary.target_progress * 100:.0f}%{', met' if summary.target_met else ''})")
    print(f"Streak:       {summary.streak_length} week(s)")
    print(f"Commission:   {summary.commission.get_breakdown_string()}")
    print(f"Fixed bonus:  {summary.fixed_bonus:,.2f}")
    if summary.next_bonus_tier is not None:
        print(f"Next tier:    {summary.next_bonus_tier.threshold:,.2f} "
              f"(+{summary.next_bonus_tier.bonus:,.2f}), {summary.remaining_to_next_bonus:,.2f} to go")
    else:
        print("Next tier:    all tiers reached")
    print(f"Tips:         {summary.tips:,.2f}")
    print(f"In pocket:    {summary.total_pocket:,.2f}")


def main():
    parser = argparse.ArgumentParser(description='Show weekly earnings')
    parser.add_argument('--user', type=str, required=True, help='User ID')
    parser.add_argument('--week', type=str, help='Any date in the week (YYYY-MM-DD), default: today')
    parser.add_argument('--backend', type=str, choices=['postgres', 'memory'], help='Storage backend')
    args = parser.parse_args()

    try:
        week = parse_date(args.week) if args.week else today_local()
    except ValueError:
        print("Error: Invalid date format. Use YYYY-MM-DD")
        return 1

    try:
        context = create_app_context(args.user, backend=args.backend)
        print_summary(context.summary.build(week))
    except EarningsError as e:
        logger.error(f"Cannot build summary: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
