"""
Main FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, Depends, HTTPException
from fastapi.templating import Jinja2Templates
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from bizcalc.config import get_settings
from bizcalc.api import router as api_router
from bizcalc.api.rate_limit import RateLimiter
from bizcalc.calculations.valuation import (
    BusinessScenario,
    calculate_valuation,
    MIN_DSCR,
)
from bizcalc.db.database import get_db, init_db
from bizcalc.db.store import ScenarioStore, to_business_scenario

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"

SECURITY_HEADERS = {
    "X-Frame-Options": "SAMEORIGIN",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self' 'unsafe-inline'; "
        "style-src 'self' 'unsafe-inline';"
    ),
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"{settings.app_name} started ({settings.app_env})")
    yield


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Business acquisition valuation and financing calculator",
    version=VERSION,
    debug=settings.debug,
    lifespan=lifespan,
)

app.state.rate_limiter = RateLimiter(
    max_requests=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window_seconds,
)

# Set up templates
templates = Jinja2Templates(directory=str(Path(__file__).parent / "ui" / "templates"))


def format_currency(value: float, decimals: int = 0) -> str:
    """Format a dollar amount for display, e.g. -$1,234."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.{decimals}f}"


templates.env.filters["currency"] = format_currency

# Include API routes
app.include_router(api_router, prefix="/api")


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


@app.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    scenario_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Render the calculator page for the default inputs or a saved scenario."""
    store = ScenarioStore(db)
    scenario = BusinessScenario()

    if scenario_id:
        business = store.get_by_id(scenario_id)
        if not business:
            raise HTTPException(status_code=404, detail="Scenario not found")
        scenario = to_business_scenario(business)

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "title": settings.app_name,
            "scenario": scenario,
            "scenario_id": scenario_id,
            "result": calculate_valuation(scenario),
            "min_dscr": MIN_DSCR,
            "businesses": store.list(),
        },
    )


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": VERSION}
