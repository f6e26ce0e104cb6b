from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from orghub.core.features.monitoring import service

router = APIRouter(
    prefix="/monitoring",
    tags=["monitoring"]
)

@router.get("/health")
async def health_check():
    db_status = await service.check_db_status()

    return {
        "status": "ok" if db_status else "error",
        "details": {
            "database": "up" if db_status else "down",
        }
    }

@router.get("/metrics")
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
