"""Pure calculation modules."""

from .commission_calc import CommissionCalculator, CommissionResult
from . import earnings_calc

__all__ = ['CommissionCalculator', 'CommissionResult', 'earnings_calc']
