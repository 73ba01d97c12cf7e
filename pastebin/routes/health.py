"""
Health check route.
"""
from fastapi import APIRouter, Depends

from pastebin.database import PasteStore, get_store
from pastebin.models import HealthCheck

router = APIRouter()


@router.get("/api/healthz", response_model=HealthCheck)
async def health_check(store: PasteStore = Depends(get_store)) -> HealthCheck:
    """
    Health check endpoint.
    Returns 200 with ok=true if application and paste store are healthy.
    """
    return HealthCheck(ok=store.is_healthy())
