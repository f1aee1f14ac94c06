import logging

from fastapi import APIRouter, Depends, Query

from pvengine.catalog import EquipmentCatalog
from pvengine.errors import PVSizerError
from pvengine.simulation import analyze_results, build_scenarios, resolve_inputs, run_project, run_scenarios

from app.config import settings
from app.core.errors import http_error
from app.core.logging import log_duration
from app.schemas.project import ProjectIn
from app.schemas.simulation import ScenarioResponse, SimulationResponse
from app.services.catalog_service import get_catalog

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/simulate",
    response_model=SimulationResponse,
    summary="Simulate a year",
    description="Run the 8760-hour energy balance for a project and return totals, advisories and optionally the hourly series.",
)
def simulate(
    body: ProjectIn,
    include_hourly: bool | None = Query(default=None),
    catalog: EquipmentCatalog = Depends(get_catalog),
):
    try:
        project = body.to_domain()
        with log_duration(
            logger,
            f"Simulated project '{project.name}'",
            panels=project.total_panels,
            inverter_id=project.system_config.inverter_id,
        ) as fields:
            result = run_project(project, catalog, seed=body.seed, system_loss=settings.system_loss)
            fields["production_kwh"] = round(result.total_production_kwh, 1)
    except (PVSizerError, ValueError) as exc:
        raise http_error(exc) from exc

    hourly = include_hourly if include_hourly is not None else settings.include_hourly
    return {
        "summary": result.summary(),
        "advisories": [
            a.to_dict()
            for a in analyze_results(result, has_battery=result.battery_capacity_kwh > 0)
        ],
        "hourly": result.hourly() if hourly else None,
    }


@router.post(
    "/scenarios",
    response_model=list[ScenarioResponse],
    summary="Compare equipment scenarios",
    description="Simulate the standard equipment alternatives for a project against one shared climate and load curve.",
)
def compare_scenarios(
    body: ProjectIn,
    catalog: EquipmentCatalog = Depends(get_catalog),
):
    try:
        project = body.to_domain()
        climate, load_curve = resolve_inputs(project, seed=body.seed)
        scenarios = build_scenarios(project, catalog)
        with log_duration(logger, f"Compared {len(scenarios)} scenarios", panels=project.total_panels):
            outcomes = run_scenarios(
                scenarios,
                catalog,
                climate,
                load_curve,
                max_workers=settings.scenario_workers,
            )
    except (PVSizerError, ValueError) as exc:
        raise http_error(exc) from exc

    return [o.to_dict() for o in outcomes]
