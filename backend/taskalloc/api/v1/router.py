from fastapi import APIRouter

from taskalloc.api.v1.solve import router as solve_router
from taskalloc.core.config import get_settings

router = APIRouter(prefix="/v1")


@router.get("/health")
def health() -> dict:
    settings = get_settings()
    return {"status": "ok", "version": settings.app_version}


router.include_router(solve_router)
