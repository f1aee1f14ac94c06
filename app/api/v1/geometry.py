from fastapi import APIRouter, Depends, HTTPException, status

from pvengine.catalog import EquipmentCatalog
from pvengine.errors import PVSizerError
from pvengine.solar import geometry

from app.core.errors import http_error
from app.schemas.electrical import RowSpacingRequest, RowSpacingResponse
from app.services.catalog_service import get_catalog

router = APIRouter()


@router.post(
    "/row-spacing",
    response_model=RowSpacingResponse,
    summary="Recommended row spacing",
    description="Gap between panel rows that avoids shading at 10:00 solar time on the winter solstice.",
)
async def row_spacing(body: RowSpacingRequest, catalog: EquipmentCatalog = Depends(get_catalog)):
    if body.panel_height_m is not None:
        height = body.panel_height_m
    elif body.panel_id is not None:
        try:
            height = catalog.panel(body.panel_id).height_m
        except PVSizerError as exc:
            raise http_error(exc) from exc
    else:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Provide panel_height_m or panel_id",
        )

    spacing = geometry.recommended_row_spacing(body.latitude, body.tilt, body.azimuth, height)
    return {
        "row_spacing_m": round(spacing, 3),
        "panel_height_m": height,
        "design_day": (
            geometry.WINTER_SOLSTICE_NORTH if body.latitude >= 0 else geometry.WINTER_SOLSTICE_SOUTH
        ),
        "design_hour": geometry.DESIGN_HOUR,
    }
