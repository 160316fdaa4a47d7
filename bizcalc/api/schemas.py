"""
Request and response schemas shared by the API routers.

Range limits here are the input validation contract: anything reaching the
calculation engine has already passed them.
"""

import re
from datetime import date
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator

from bizcalc.calculations.valuation import BusinessScenario
from bizcalc.db.models import Business

MAX_AMOUNT = 1_000_000_000
MAX_COST = 10_000_000
MAX_DURATION_MONTHS = 600

TAG_PATTERN = re.compile(r"<[^>]*>")


class ScenarioInputs(BaseModel):
    """Numeric deal inputs with their defaults and allowed ranges."""

    # Financial data
    sde: float = Field(500000, ge=0, le=MAX_AMOUNT)
    price: float = Field(1750000, ge=0, le=MAX_AMOUNT)
    optional_salary: float = Field(125000, ge=0, le=MAX_COST)
    extra_costs: float = Field(0, ge=0, le=MAX_COST)
    capex: float = Field(0, ge=0, le=MAX_COST)
    consulting_fee: float = Field(0, ge=0, le=MAX_COST)

    # Financing structure
    pct_down_payment: float = Field(10, ge=0, le=100)
    pct_seller_carry: float = Field(10, ge=0, le=100)
    pct_junior_debt: float = Field(0, ge=0, le=100)
    loan_fee: float = Field(13485, ge=0, le=MAX_COST)
    closing_costs: float = Field(15000, ge=0, le=MAX_COST)
    other_fees: float = Field(15000, ge=0, le=MAX_COST)

    # Loan terms
    seller_duration: int = Field(120, ge=1, le=MAX_DURATION_MONTHS)
    seller_interest: float = Field(7, ge=0, le=100)
    junior_duration: int = Field(120, ge=1, le=MAX_DURATION_MONTHS)
    junior_interest: float = Field(8, ge=0, le=100)
    sba_duration: int = Field(120, ge=1, le=MAX_DURATION_MONTHS)
    sba_interest: float = Field(10, ge=0, le=100)

    def to_scenario(self, business_name: str = "") -> BusinessScenario:
        """Build the engine snapshot for these inputs."""
        values = self.model_dump(include=set(ScenarioInputs.model_fields))
        return BusinessScenario(business_name=business_name, **values)


def clean_business_name(value):
    """Trim whitespace and strip HTML tags from a business name."""
    if isinstance(value, str):
        return TAG_PATTERN.sub("", value).strip()
    return value


class ScenarioCreate(ScenarioInputs):
    """Schema for creating or replacing a stored scenario."""

    business_name: str = Field(..., min_length=1, max_length=200)

    @field_validator("business_name", mode="before")
    @classmethod
    def clean_name(cls, value):
        return clean_business_name(value)


class ValuationInput(ScenarioInputs):
    """Ad-hoc valuation request; the name is informational only."""

    business_name: Optional[str] = Field(None, max_length=200)

    @field_validator("business_name", mode="before")
    @classmethod
    def clean_name(cls, value):
        return clean_business_name(value)


class ScenarioResponse(BaseModel):
    """Full stored scenario, reported as stored without range checks."""

    id: str
    business_name: str
    sde: float
    price: float
    optional_salary: float
    extra_costs: float
    capex: float
    consulting_fee: float
    pct_down_payment: float
    pct_seller_carry: float
    pct_junior_debt: float
    loan_fee: float
    closing_costs: float
    other_fees: float
    seller_duration: int
    seller_interest: float
    junior_duration: int
    junior_interest: float
    sba_duration: int
    sba_interest: float
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ScenarioSummary(BaseModel):
    """Row in the scenario list."""

    id: str
    business_name: str
    price: float
    sde: float
    multiple: float
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ScenarioListResponse(BaseModel):
    """Response for listing scenarios."""

    scenarios: List[ScenarioSummary]
    total: int


class LoanInput(BaseModel):
    """Terms for a single loan tranche."""

    principal: float = Field(..., ge=0, le=MAX_AMOUNT)
    annual_rate_percent: float = Field(..., ge=0, le=100)
    num_payments: int = Field(..., ge=1, le=MAX_DURATION_MONTHS)
    start_date: Optional[date] = None


def scenario_to_response(business: Business) -> ScenarioResponse:
    """Convert a Business model to the response schema."""
    return ScenarioResponse(
        id=business.id,
        business_name=business.business_name,
        sde=business.sde,
        price=business.price,
        optional_salary=business.optional_salary,
        extra_costs=business.extra_costs,
        capex=business.capex,
        consulting_fee=business.consulting_fee,
        pct_down_payment=business.pct_down_payment,
        pct_seller_carry=business.pct_seller_carry,
        pct_junior_debt=business.pct_junior_debt,
        loan_fee=business.loan_fee,
        closing_costs=business.closing_costs,
        other_fees=business.other_fees,
        seller_duration=business.seller_duration,
        seller_interest=business.seller_interest,
        junior_duration=business.junior_duration,
        junior_interest=business.junior_interest,
        sba_duration=business.sba_duration,
        sba_interest=business.sba_interest,
        created_at=business.created_at.isoformat() if business.created_at else None,
        updated_at=business.updated_at.isoformat() if business.updated_at else None,
    )


def scenario_to_summary(business: Business) -> ScenarioSummary:
    """Convert a Business model to a list row."""
    return ScenarioSummary(
        id=business.id,
        business_name=business.business_name,
        price=business.price,
        sde=business.sde,
        multiple=business.price / business.sde if business.sde else 0.0,
        created_at=business.created_at.isoformat() if business.created_at else None,
        updated_at=business.updated_at.isoformat() if business.updated_at else None,
    )
