from fastapi import APIRouter

from catalog.cache import cache
from catalog.middleware import request_stats
from catalog.schemas import MetricsResponse

router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics():
    return MetricsResponse(**request_stats.snapshot, cache_info=cache.stats)
