"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results without
touching the database. Used by the page for real-time updates.
"""

from dataclasses import asdict

from fastapi import APIRouter

from bizcalc.api.schemas import ValuationInput, LoanInput
from bizcalc.calculations import amortization
from bizcalc.calculations.valuation import (
    LoanTerms,
    calculate_valuation,
    summarize_tranche,
)

router = APIRouter()


@router.post("/valuation")
async def calculate_valuation_endpoint(inputs: ValuationInput):
    """Calculate the full acquisition picture for the posted inputs."""
    business_name = inputs.business_name or ""
    result = calculate_valuation(inputs.to_scenario(business_name))

    return {"business_name": business_name, **result.to_dict()}


@router.post("/loan")
async def calculate_loan(inputs: LoanInput):
    """Payment, interest and balloon figures for a single tranche."""
    tranche = summarize_tranche(
        LoanTerms(inputs.principal, inputs.annual_rate_percent, inputs.num_payments)
    )
    return {**asdict(tranche), "annual_payment": tranche.annual_payment}


@router.post("/amortization")
async def calculate_amortization(inputs: LoanInput):
    """Generate loan amortization schedule."""
    schedule = amortization.generate_amortization_schedule(
        principal=inputs.principal,
        annual_rate_percent=inputs.annual_rate_percent,
        num_payments=inputs.num_payments,
        start_date=inputs.start_date,
    )

    return {
        "monthly_payment": amortization.calculate_payment(
            inputs.principal, inputs.annual_rate_percent, inputs.num_payments
        ),
        "schedule": schedule,
        "total_interest": amortization.calculate_total_interest(schedule),
        "total_principal": amortization.calculate_total_principal(schedule),
    }
