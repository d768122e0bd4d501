import logging

from fastapi import APIRouter, Depends, HTTPException, Path

from catalog.dependencies import get_repository
from catalog.errors import Missing, ServerError
from catalog.repositories import Repository
from catalog.schemas import MAX_SERVICE_ID, Service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["services"])

UNAVAILABLE = "Service catalog unavailable"


@router.get("/services", response_model=list[Service])
async def list_services(repo: Repository = Depends(get_repository)):
    try:
        return await repo.list()
    except ServerError:
        logger.exception("Listing services failed")
        raise HTTPException(status_code=500, detail=UNAVAILABLE)


@router.get("/service/{service_id}", response_model=Service)
async def get_service(
    service_id: int = Path(ge=0, le=MAX_SERVICE_ID),
    repo: Repository = Depends(get_repository),
):
    try:
        return await repo.get(service_id)
    except Missing:
        raise HTTPException(status_code=404, detail="Service not found")
    except ServerError:
        logger.exception("Fetching service id=%s failed", service_id)
        raise HTTPException(status_code=500, detail=UNAVAILABLE)
