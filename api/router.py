from fastapi import APIRouter
from api.endpoints.analyze import router as analyze_router
from api.endpoints.records import router as records_router
from api.endpoints.chat import router as chat_router
from api.endpoints.health import router as health_router

api_router = APIRouter()
api_router.include_router(analyze_router, tags=["analyze"])
api_router.include_router(records_router, tags=["records"])
api_router.include_router(chat_router, tags=["chat"])
api_router.include_router(health_router, tags=["health"])
