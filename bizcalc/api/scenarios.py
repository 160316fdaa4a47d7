"""
Scenario management API endpoints.
"""

import logging

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from bizcalc.api.rate_limit import enforce_rate_limit
from bizcalc.api.schemas import (
    ScenarioCreate,
    ScenarioResponse,
    ScenarioListResponse,
    scenario_to_response,
    scenario_to_summary,
)
from bizcalc.calculations.valuation import calculate_valuation
from bizcalc.db.database import get_db
from bizcalc.db.store import ScenarioStore, to_business_scenario

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(db: Session = Depends(get_db)) -> ScenarioStore:
    """Dependency for getting a scenario store bound to the request session."""
    return ScenarioStore(db)


@router.get("/", response_model=ScenarioListResponse)
async def list_scenarios(store: ScenarioStore = Depends(get_store)):
    """List all scenarios, most recently modified first."""
    scenarios = store.list()
    return ScenarioListResponse(
        scenarios=[scenario_to_summary(s) for s in scenarios],
        total=len(scenarios),
    )


@router.post(
    "/",
    response_model=ScenarioResponse,
    status_code=201,
    dependencies=[Depends(enforce_rate_limit)],
)
async def create_scenario(
    scenario_data: ScenarioCreate,
    store: ScenarioStore = Depends(get_store),
):
    """Create a new scenario."""
    scenario_id = store.create(scenario_data.model_dump())
    return scenario_to_response(store.get_by_id(scenario_id))


@router.get("/stats")
async def scenario_stats(store: ScenarioStore = Depends(get_store)):
    """Statistics about the stored scenarios."""
    return store.stats()


@router.get("/{scenario_id}", response_model=ScenarioResponse)
async def get_scenario(
    scenario_id: str,
    store: ScenarioStore = Depends(get_store),
):
    """Get a scenario by ID with full details."""
    business = store.get_by_id(scenario_id)
    if not business:
        raise HTTPException(status_code=404, detail="Scenario not found")

    return scenario_to_response(business)


@router.put(
    "/{scenario_id}",
    response_model=ScenarioResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
async def update_scenario(
    scenario_id: str,
    scenario_data: ScenarioCreate,
    store: ScenarioStore = Depends(get_store),
):
    """Replace a scenario with the submitted inputs."""
    business = store.update(scenario_id, scenario_data.model_dump())
    if not business:
        raise HTTPException(status_code=404, detail="Scenario not found")

    return scenario_to_response(business)


@router.delete("/{scenario_id}", dependencies=[Depends(enforce_rate_limit)])
async def delete_scenario(
    scenario_id: str,
    store: ScenarioStore = Depends(get_store),
):
    """Delete a scenario."""
    if not store.delete(scenario_id):
        raise HTTPException(status_code=404, detail="Scenario not found")

    return {"deleted": True, "id": scenario_id}


@router.get("/{scenario_id}/valuation")
async def get_scenario_valuation(
    scenario_id: str,
    store: ScenarioStore = Depends(get_store),
):
    """Recalculate the valuation for a stored scenario."""
    business = store.get_by_id(scenario_id)
    if not business:
        raise HTTPException(status_code=404, detail="Scenario not found")

    result = calculate_valuation(to_business_scenario(business))

    return {
        "scenario_id": business.id,
        "business_name": business.business_name,
        **result.to_dict(),
    }
