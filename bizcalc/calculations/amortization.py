"""
Loan Amortization Calculations

Tranche-level loan math shared by the SBA loan, seller carry and junior
debt. Rates are annual percentages (e.g., 7 for 7%), terms are numbers of
monthly payments.

Interest paid and remaining balance both walk the same month-by-month
stepping rule, so principal paid and balance remaining always reconcile.
"""

from typing import List, Dict, Iterator, Optional, Tuple
from datetime import date
from dateutil.relativedelta import relativedelta


def monthly_rate(annual_rate_percent: float) -> float:
    """Convert an annual percentage rate to a monthly decimal rate."""
    return annual_rate_percent / 100 / 12


def calculate_payment(
    principal: float, annual_rate_percent: float, num_payments: int
) -> float:
    """
    Calculate the fixed monthly payment for a fully amortizing loan.

    Args:
        principal: Amount financed
        annual_rate_percent: Annual interest rate in percent (e.g., 7 for 7%)
        num_payments: Number of monthly payments

    Returns:
        Monthly payment amount, 0 for an empty loan
    """
    if principal <= 0:
        return 0.0
    if num_payments <= 0:
        return 0.0

    rate = monthly_rate(annual_rate_percent)

    if rate == 0:
        return principal / num_payments

    growth = (1 + rate) ** num_payments
    return principal * (rate * growth) / (growth - 1)


def _amortize(
    principal: float, annual_rate_percent: float, num_payments: int
) -> Iterator[Tuple[float, float, float]]:
    """
    Step through the loan one month at a time.

    Yields (interest, principal_paid, ending_balance) for each of the
    num_payments months. The balance is not clamped here.
    """
    rate = monthly_rate(annual_rate_percent)
    payment = calculate_payment(principal, annual_rate_percent, num_payments)
    balance = principal

    for _ in range(num_payments):
        interest = balance * rate
        principal_paid = payment - interest
        balance -= principal_paid
        yield interest, principal_paid, balance


def calculate_interest_paid(
    principal: float,
    annual_rate_percent: float,
    num_payments: int,
    months_to_calculate: int,
) -> float:
    """Total interest paid over the first N months of the loan."""
    if principal <= 0 or num_payments <= 0:
        return 0.0

    months = min(months_to_calculate, num_payments)
    total_interest = 0.0
    for month, (interest, _, _) in enumerate(
        _amortize(principal, annual_rate_percent, num_payments)
    ):
        if month >= months:
            break
        total_interest += interest

    return total_interest


def calculate_remaining_balance(
    principal: float,
    annual_rate_percent: float,
    num_payments: int,
    months_paid: int,
) -> float:
    """Calculate remaining loan balance (the balloon) after N payments."""
    if principal <= 0 or num_payments <= 0:
        return 0.0

    months = min(months_paid, num_payments)
    balance = principal
    for month, (_, _, ending_balance) in enumerate(
        _amortize(principal, annual_rate_percent, num_payments)
    ):
        if month >= months:
            break
        balance = ending_balance

    # Floating-point drift can leave a tiny negative balance on the last payment
    return max(0.0, balance)


def calculate_principal_paid(
    principal: float,
    annual_rate_percent: float,
    num_payments: int,
    months: int,
) -> float:
    """Principal retired over the first N months (payments less interest)."""
    payment = calculate_payment(principal, annual_rate_percent, num_payments)
    months = max(0, min(months, num_payments))
    return payment * months - calculate_interest_paid(
        principal, annual_rate_percent, num_payments, months
    )


def generate_amortization_schedule(
    principal: float,
    annual_rate_percent: float,
    num_payments: int,
    start_date: Optional[date] = None,
) -> List[Dict]:
    """
    Generate a full amortization schedule.

    Args:
        principal: Loan principal amount
        annual_rate_percent: Annual interest rate in percent
        num_payments: Number of monthly payments
        start_date: Date of first payment (defaults to today)

    Returns:
        List of amortization rows, amounts rounded to cents
    """
    if principal <= 0 or num_payments <= 0:
        return []

    if start_date is None:
        start_date = date.today()

    schedule = []
    payment = calculate_payment(principal, annual_rate_percent, num_payments)
    beginning_balance = principal

    for period, (interest, principal_paid, ending_balance) in enumerate(
        _amortize(principal, annual_rate_percent, num_payments), start=1
    ):
        period_date = start_date + relativedelta(months=period - 1)

        schedule.append(
            {
                "period": period,
                "date": period_date.isoformat(),
                "beginning_balance": round(max(0.0, beginning_balance), 2),
                "payment": round(payment, 2),
                "interest": round(interest, 2),
                "principal": round(principal_paid, 2),
                "ending_balance": round(max(0.0, ending_balance), 2),
            }
        )

        beginning_balance = ending_balance

    return schedule


def calculate_total_interest(schedule: List[Dict]) -> float:
    """Calculate total interest paid over loan term."""
    return sum(row["interest"] for row in schedule)


def calculate_total_principal(schedule: List[Dict]) -> float:
    """Calculate total principal repaid over loan term."""
    return sum(row["principal"] for row in schedule)
