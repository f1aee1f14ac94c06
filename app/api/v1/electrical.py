from fastapi import APIRouter, Depends

from pvengine.catalog import EquipmentCatalog
from pvengine.electrical import suggest_fix, verify_project
from pvengine.errors import PVSizerError

from app.core.errors import http_error
from app.schemas.electrical import FixSuggestionResponse, VerificationResponse
from app.schemas.project import ProjectIn
from app.services.catalog_service import get_catalog

router = APIRouter()


@router.post(
    "/verify",
    response_model=VerificationResponse,
    summary="Verify stringing",
    description="Build a string plan for the selected panel and inverter and report errors, warnings, cable sections and protection ratings.",
)
def verify(body: ProjectIn, catalog: EquipmentCatalog = Depends(get_catalog)):
    try:
        project = body.to_domain()
    except (PVSizerError, ValueError) as exc:
        raise http_error(exc) from exc
    return verify_project(project, catalog).to_dict()


@router.post(
    "/suggest-fix",
    response_model=FixSuggestionResponse | None,
    summary="Suggest an inverter",
    description="Search the catalog for an inverter model and count under which the project verifies; null when none does.",
)
def fix(body: ProjectIn, catalog: EquipmentCatalog = Depends(get_catalog)):
    try:
        project = body.to_domain()
    except (PVSizerError, ValueError) as exc:
        raise http_error(exc) from exc
    suggestion = suggest_fix(project, catalog)
    return suggestion.to_dict() if suggestion is not None else None
