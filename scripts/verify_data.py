"""
Print every stored business with its recomputed headline figures.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bizcalc.calculations.valuation import calculate_valuation
from bizcalc.db.database import SessionLocal
from bizcalc.db.store import ScenarioStore, to_business_scenario


def main():
    db = SessionLocal()

    try:
        store = ScenarioStore(db)
        businesses = store.list()

        print("=== Database Verification ===\n")
        print(f"Total businesses: {len(businesses)}\n")

        for business in businesses:
            result = calculate_valuation(to_business_scenario(business))

            print(f"Business {business.id}")
            print(f"  Name: {business.business_name}")
            print(f"  Price: ${business.price:,.0f}")
            print(f"  SDE: ${business.sde:,.0f}")
            print(f"  Down Payment %: {business.pct_down_payment}%")
            print(f"  Seller Carry %: {business.pct_seller_carry}%")
            print(f"  Junior Debt %: {business.pct_junior_debt}%")
            print(f"  SBA Interest: {business.sba_interest}%")
            print(f"  DSCR: {result.dscr:.2f} ({result.dscr_rating.value})")
            print(f"  Reconciles to price: {'yes' if result.validation_pass else 'NO'}")
            print(f"  Created: {business.created_at}")
            print(f"  Modified: {business.updated_at}")
            print()

        stats = store.stats()
        print("Database Stats:")
        print(f"  Total Records: {stats['total_scenarios']}")
        print(f"  Database Size: {stats['database_size']:,} bytes")

    finally:
        db.close()


if __name__ == "__main__":
    main()
