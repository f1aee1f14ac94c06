import logging
from functools import lru_cache

from pvengine.catalog import EquipmentCatalog

from app.config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def load_catalog() -> EquipmentCatalog:
    """Catalog from ``settings.catalog_path``, or the built-in library."""
    if settings.catalog_path:
        return EquipmentCatalog.from_json(settings.catalog_path)
    logger.info("Using built-in equipment library")
    return EquipmentCatalog.default()


def get_catalog() -> EquipmentCatalog:
    """FastAPI dependency; override in tests to inject a custom catalog."""
    return load_catalog()
