"""Stylist earnings engine: settings history, streaks and commission."""
