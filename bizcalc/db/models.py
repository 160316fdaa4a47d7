"""
SQLAlchemy ORM models for stored business scenarios.
"""

from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    Boolean,
    DateTime,
)
from sqlalchemy.orm import declarative_base
import uuid

Base = declarative_base()


def generate_uuid():
    return str(uuid.uuid4())


class AuditMixin:
    """Mixin for audit fields on all models."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
        index=True,
    )
    is_deleted = Column(Boolean, default=False, nullable=False)


class Business(AuditMixin, Base):
    """A saved acquisition scenario: inputs only, results are recomputed."""

    __tablename__ = "businesses"

    id = Column(String, primary_key=True, default=generate_uuid)
    business_name = Column(String(200), nullable=False, index=True)

    # Financial data
    sde = Column(Float, default=500000)
    price = Column(Float, default=1750000)
    optional_salary = Column(Float, default=125000)
    extra_costs = Column(Float, default=0)
    capex = Column(Float, default=0)
    consulting_fee = Column(Float, default=0)

    # Financing structure (percent of price)
    pct_down_payment = Column(Float, default=10)
    pct_seller_carry = Column(Float, default=10)
    pct_junior_debt = Column(Float, default=0)
    loan_fee = Column(Float, default=13485)
    closing_costs = Column(Float, default=15000)
    other_fees = Column(Float, default=15000)

    # Loan terms (months, annual percent)
    seller_duration = Column(Integer, default=120)
    seller_interest = Column(Float, default=7)
    junior_duration = Column(Integer, default=120)
    junior_interest = Column(Float, default=8)
    sba_duration = Column(Integer, default=120)
    sba_interest = Column(Float, default=10)
