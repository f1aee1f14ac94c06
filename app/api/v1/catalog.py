from fastapi import APIRouter, Depends

from pvengine.catalog import EquipmentCatalog

from app.schemas.catalog import CatalogResponse
from app.services.catalog_service import get_catalog

router = APIRouter()


@router.get(
    "/catalog",
    response_model=CatalogResponse,
    summary="List equipment",
    description="Return the panels, inverters and batteries available for sizing.",
)
async def list_catalog(catalog: EquipmentCatalog = Depends(get_catalog)):
    return catalog.to_dict()
