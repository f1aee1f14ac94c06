"""Translation of engine exceptions into HTTP errors."""

from fastapi import HTTPException, status

from pvengine.errors import CatalogError, PVSizerError


def http_error(exc: PVSizerError | ValueError) -> HTTPException:
    """404 for unknown catalog ids, 422 for any other malformed input."""
    if isinstance(exc, CatalogError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
