from fastapi import APIRouter, Depends, HTTPException
from api.deps import Services, get_services

router = APIRouter()


@router.get("/health")
async def health(services: Services = Depends(get_services)):
    try:
        await services.kv.get("health:probe")
    except Exception as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return {"status": "ok"}
