"""
Seed the database with a demo acquisition using the default deal structure.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bizcalc.calculations.valuation import calculate_valuation
from bizcalc.db.database import SessionLocal, init_db
from bizcalc.db.models import Business
from bizcalc.db.store import ScenarioStore, to_business_scenario

DEMO_NAME = "Demo HVAC Services"


def main():
    init_db()
    db = SessionLocal()

    try:
        existing = db.query(Business).filter(
            Business.business_name == DEMO_NAME,
            Business.is_deleted == False,
        ).first()
        if existing:
            print(f"Business '{DEMO_NAME}' already exists (ID: {existing.id})")
            return

        store = ScenarioStore(db)
        business_id = store.create({
            "business_name": DEMO_NAME,
            "sde": 500000,
            "price": 1750000,
            "optional_salary": 125000,
            "pct_down_payment": 10,
            "pct_seller_carry": 10,
            "pct_junior_debt": 0,
            "sba_duration": 120,
            "sba_interest": 10,
            "seller_duration": 120,
            "seller_interest": 7,
        })
        business = store.get_by_id(business_id)
        result = calculate_valuation(to_business_scenario(business))

        print(f"Created business: {business.business_name} (ID: {business.id})")
        print(f"  Price: ${business.price:,.0f}")
        print(f"  SBA loan (with fees): ${result.sba_loan_amount:,.0f}")
        print(f"  Monthly cash flow: ${result.monthly_cash_flow:,.0f}")
        print(f"  DSCR: {result.dscr:.2f} ({result.dscr_rating.value})")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
