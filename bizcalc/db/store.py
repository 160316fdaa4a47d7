"""
Scenario store.

Persists named business scenarios keyed by an opaque id. Only inputs are
stored; the valuation engine recomputes results from a snapshot.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from bizcalc.calculations.valuation import BusinessScenario, SCENARIO_DEFAULTS
from bizcalc.db.database import database_file_size
from bizcalc.db.models import Business

logger = logging.getLogger(__name__)

SCENARIO_FIELDS = ["business_name"] + list(SCENARIO_DEFAULTS)


def apply_defaults(data: Dict) -> Dict:
    """Fill missing or null scenario fields with their defaults."""
    values = {"business_name": data.get("business_name")}
    for field, default in SCENARIO_DEFAULTS.items():
        value = data.get(field)
        values[field] = default if value is None else value
    return values


def to_business_scenario(business: Business) -> BusinessScenario:
    """Take an immutable engine snapshot of a stored record."""
    values = apply_defaults(
        {field: getattr(business, field) for field in SCENARIO_FIELDS}
    )
    values["seller_duration"] = int(values["seller_duration"])
    values["junior_duration"] = int(values["junior_duration"])
    values["sba_duration"] = int(values["sba_duration"])
    return BusinessScenario(**values)


class ScenarioStore:
    """CRUD access to stored scenarios over a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def _active(self):
        return self.db.query(Business).filter(Business.is_deleted == False)

    def create(self, data: Dict) -> str:
        """Create a scenario and return its id."""
        business = Business(**apply_defaults(data))
        self.db.add(business)
        self.db.commit()
        self.db.refresh(business)

        logger.info(f"Created scenario {business.id} ({business.business_name})")
        return business.id

    def get_by_id(self, scenario_id: str) -> Optional[Business]:
        """Get a scenario by id, None if missing or deleted."""
        return self._active().filter(Business.id == scenario_id).first()

    def list(self) -> List[Business]:
        """All scenarios, most recently modified first."""
        return (
            self._active()
            .order_by(Business.updated_at.desc(), Business.created_at.desc())
            .all()
        )

    def update(self, scenario_id: str, data: Dict) -> Optional[Business]:
        """Replace every field of a scenario. Last write wins."""
        business = self.get_by_id(scenario_id)
        if not business:
            return None

        for field, value in apply_defaults(data).items():
            setattr(business, field, value)
        business.updated_at = datetime.utcnow()

        self.db.commit()
        self.db.refresh(business)

        logger.info(f"Updated scenario {scenario_id}")
        return business

    def delete(self, scenario_id: str) -> bool:
        """Soft delete a scenario."""
        business = self.get_by_id(scenario_id)
        if not business:
            return False

        business.is_deleted = True
        self.db.commit()

        logger.info(f"Deleted scenario {scenario_id}")
        return True

    def stats(self) -> Dict:
        """Summary statistics about stored scenarios."""
        return {
            "total_scenarios": self._active().count(),
            "database_size": database_file_size(self.db.get_bind().url),
        }
