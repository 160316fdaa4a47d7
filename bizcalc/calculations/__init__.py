"""
Financial Calculation Engine

Pure, side-effect-free loan and valuation math for business acquisitions.
"""

from bizcalc.calculations import amortization, valuation

__all__ = ["amortization", "valuation"]
