from fastapi import APIRouter

from folio.utils import now

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check", operation_id="healthCheck")
async def health_check() -> dict[str, str]:
    return {"status": "ok", "timestamp": now().isoformat()}
