from fastapi import APIRouter

from translation_orchestrator.api.v1.translation import router as translation_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(translation_router)
