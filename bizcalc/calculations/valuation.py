"""
Business Acquisition Valuation

Combines the SBA loan, seller carry and junior debt tranches with the
business's operating figures into the acquisition-level picture: cash flow,
DSCR and the total consideration reaching the seller.

Everything here is a pure function of a BusinessScenario snapshot and is
recomputed in full on every call.
"""

import enum
from dataclasses import dataclass, asdict
from typing import Dict

from bizcalc.calculations.amortization import (
    calculate_payment,
    calculate_interest_paid,
    calculate_remaining_balance,
)

FIVE_YEARS = 60
TEN_YEARS = 120

STRONG_DSCR = 1.50
MIN_DSCR = 1.25

RECONCILIATION_TOLERANCE = 0.01


class DSCRRating(str, enum.Enum):
    """Debt service coverage classification."""
    strong = "Strong"
    acceptable = "Acceptable"
    weak = "Weak"


DSCR_COLORS = {
    DSCRRating.strong: "green",
    DSCRRating.acceptable: "amber",
    DSCRRating.weak: "red",
}


def classify_dscr(dscr: float) -> DSCRRating:
    """Classify a DSCR against the 1.50 / 1.25 lender thresholds."""
    if dscr >= STRONG_DSCR:
        return DSCRRating.strong
    if dscr >= MIN_DSCR:
        return DSCRRating.acceptable
    return DSCRRating.weak


def calculate_dscr(noi: float, debt_service: float) -> float:
    """
    Calculate Debt Service Coverage Ratio (DSCR).

    Returns 0 when there is no debt service.
    """
    if debt_service <= 0:
        return 0.0
    return noi / debt_service


@dataclass(frozen=True)
class LoanTerms:
    """Terms of a single financing tranche."""

    principal: float
    annual_rate_percent: float
    num_payments: int


@dataclass(frozen=True)
class TrancheResult:
    """Calculated figures for one tranche."""

    principal: float
    annual_rate_percent: float
    num_payments: int
    monthly_payment: float
    interest_5yr: float
    interest_10yr: float
    principal_paid_5yr: float
    principal_paid_10yr: float
    balloon_5yr: float
    balloon_10yr: float

    @property
    def annual_payment(self) -> float:
        return self.monthly_payment * 12


def summarize_tranche(terms: LoanTerms) -> TrancheResult:
    """Run the amortization figures for one tranche at 5 and 10 years."""
    args = (terms.principal, terms.annual_rate_percent, terms.num_payments)

    payment = calculate_payment(*args)
    interest_5yr = calculate_interest_paid(*args, FIVE_YEARS)
    interest_10yr = calculate_interest_paid(*args, TEN_YEARS)

    return TrancheResult(
        principal=terms.principal,
        annual_rate_percent=terms.annual_rate_percent,
        num_payments=terms.num_payments,
        monthly_payment=payment,
        interest_5yr=interest_5yr,
        interest_10yr=interest_10yr,
        principal_paid_5yr=payment * min(FIVE_YEARS, terms.num_payments) - interest_5yr,
        principal_paid_10yr=payment * min(TEN_YEARS, terms.num_payments) - interest_10yr,
        balloon_5yr=calculate_remaining_balance(*args, FIVE_YEARS),
        balloon_10yr=calculate_remaining_balance(*args, TEN_YEARS),
    )


@dataclass(frozen=True)
class BusinessScenario:
    """
    Inputs for one acquisition.

    Monetary fields are in dollars, pct_* and *_interest fields in percent,
    *_duration fields in months.
    """

    business_name: str = ""
    sde: float = 500000
    price: float = 1750000
    optional_salary: float = 125000
    extra_costs: float = 0
    capex: float = 0
    consulting_fee: float = 0

    # Financing structure
    pct_down_payment: float = 10
    pct_seller_carry: float = 10
    pct_junior_debt: float = 0
    loan_fee: float = 13485
    closing_costs: float = 15000
    other_fees: float = 15000

    # Loan terms
    seller_duration: int = 120
    seller_interest: float = 7
    junior_duration: int = 120
    junior_interest: float = 8
    sba_duration: int = 120
    sba_interest: float = 10


SCENARIO_DEFAULTS: Dict = {
    key: value for key, value in asdict(BusinessScenario()).items()
    if key != "business_name"
}


@dataclass(frozen=True)
class ValuationResult:
    """Calculated acquisition metrics. Never persisted."""

    multiple: float
    down_payment: float
    seller_carry: float
    junior_debt: float
    sba_loan_base: float
    sba_loan_amount: float

    seller: TrancheResult
    junior: TrancheResult
    sba: TrancheResult

    monthly_cash_flow: float
    annual_cash_flow: float
    annual_cash_flow_with_salary: float
    net_operating_income: float
    total_annual_debt_service: float
    dscr: float
    dscr_rating: DSCRRating

    total_to_seller_5yr: float
    total_to_seller_10yr: float
    total_paid_5yr: float
    total_paid_10yr: float

    validation_pass: bool

    @property
    def dscr_color(self) -> str:
        return DSCR_COLORS[self.dscr_rating]

    def to_dict(self) -> Dict:
        """Flatten into a single mapping, tranche fields prefixed by name."""
        data = {}
        for field_name, value in asdict(self).items():
            if field_name in ("seller", "junior", "sba"):
                for key, tranche_value in value.items():
                    data[f"{field_name}_{key}"] = tranche_value
            else:
                data[field_name] = value
        data["dscr_rating"] = self.dscr_rating.value
        data["dscr_color"] = self.dscr_color
        return data


def calculate_valuation(scenario: BusinessScenario) -> ValuationResult:
    """
    Calculate the full financial picture for an acquisition.

    Args:
        scenario: Immutable snapshot of the deal inputs

    Returns:
        ValuationResult with every derived metric
    """
    s = scenario

    multiple = s.price / s.sde if s.sde > 0 else 0.0

    # Split the purchase price
    down_payment = s.price * (s.pct_down_payment / 100)
    seller_carry = s.price * (s.pct_seller_carry / 100)
    junior_debt = s.price * (s.pct_junior_debt / 100)

    # SBA covers the remainder; negative when the allocations exceed the price
    sba_loan_base = s.price - down_payment - seller_carry - junior_debt
    sba_loan_amount = sba_loan_base + s.loan_fee + s.closing_costs + s.other_fees

    seller = summarize_tranche(
        LoanTerms(seller_carry, s.seller_interest, s.seller_duration)
    )
    junior = summarize_tranche(
        LoanTerms(junior_debt, s.junior_interest, s.junior_duration)
    )
    sba = summarize_tranche(
        LoanTerms(sba_loan_amount, s.sba_interest, s.sba_duration)
    )

    monthly_cash_flow = (
        (s.sde / 12)
        - sba.monthly_payment
        - seller.monthly_payment
        - junior.monthly_payment
        - (s.optional_salary / 12)
        - (s.extra_costs / 12)
        - (s.capex / 12)
    )
    annual_cash_flow = (
        s.sde
        - sba.annual_payment
        - seller.annual_payment
        - junior.annual_payment
        - s.optional_salary
        - s.extra_costs
        - s.capex
    )

    net_operating_income = s.sde - s.optional_salary - s.extra_costs - s.capex
    total_annual_debt_service = (
        sba.annual_payment + seller.annual_payment + junior.annual_payment
    )
    dscr = calculate_dscr(net_operating_income, total_annual_debt_service)

    total_to_seller_5yr = (
        down_payment
        + sba_loan_base
        + junior_debt
        + seller.monthly_payment * FIVE_YEARS
        + seller.balloon_5yr
        + s.consulting_fee
    )
    # No balloon term at 10 years: the seller payment stream stops at its own
    # duration and any balance beyond month 120 is left out.
    total_to_seller_10yr = (
        down_payment
        + sba_loan_base
        + junior_debt
        + seller.monthly_payment * min(TEN_YEARS, s.seller_duration)
        + s.consulting_fee
    )

    total_paid_5yr = (
        (sba.monthly_payment + seller.monthly_payment + junior.monthly_payment)
        * FIVE_YEARS
        + down_payment
        + s.extra_costs * 5
        + s.consulting_fee
        + seller.balloon_5yr
        + junior.balloon_5yr
    )
    total_paid_10yr = (
        (sba.monthly_payment + seller.monthly_payment + junior.monthly_payment)
        * TEN_YEARS
        + down_payment
        + s.extra_costs * 10
        + s.consulting_fee
    )

    total_check = sba_loan_base + seller_carry + junior_debt + down_payment
    validation_pass = abs(total_check - s.price) < RECONCILIATION_TOLERANCE

    return ValuationResult(
        multiple=multiple,
        down_payment=down_payment,
        seller_carry=seller_carry,
        junior_debt=junior_debt,
        sba_loan_base=sba_loan_base,
        sba_loan_amount=sba_loan_amount,
        seller=seller,
        junior=junior,
        sba=sba,
        monthly_cash_flow=monthly_cash_flow,
        annual_cash_flow=annual_cash_flow,
        annual_cash_flow_with_salary=annual_cash_flow + s.optional_salary,
        net_operating_income=net_operating_income,
        total_annual_debt_service=total_annual_debt_service,
        dscr=dscr,
        dscr_rating=classify_dscr(dscr),
        total_to_seller_5yr=total_to_seller_5yr,
        total_to_seller_10yr=total_to_seller_10yr,
        total_paid_5yr=total_paid_5yr,
        total_paid_10yr=total_paid_10yr,
        validation_pass=validation_pass,
    )
