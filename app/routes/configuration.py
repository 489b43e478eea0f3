# app/routes/configuration.py
"""
API endpoints for the legal configuration (minimum wage, subsidy, factors, divisor).
"""

from fastapi import APIRouter

from app.core import storage
from app.core.legal_config import apply_configuration_update
from app.core.rates import describe_formulas
from app.routes.shared import ConfigurationUpdate, ok

router = APIRouter(prefix="/api/config", tags=["config"])


@router.get("")
async def get_configuration():
    return ok(storage.load_configuration().model_dump(mode="json"))


@router.put("")
def update_configuration(body: ConfigurationUpdate):
    """Partial update; factors are merged per kind."""
    with storage.config_lock:
        current = storage.load_configuration()
        updated = apply_configuration_update(current, body.model_dump(exclude_unset=True))
        storage.save_configuration(updated)

    return ok(updated.model_dump(mode="json"), message="Configuration updated")


@router.get("/formulas")
async def get_formulas():
    """Unit values of a minimum-wage salary under the current configuration."""
    return ok(describe_formulas(storage.load_configuration()))
