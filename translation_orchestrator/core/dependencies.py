from fastapi import Request

from translation_orchestrator.gateway.service import TranslationService


def get_translation_service(request: Request) -> TranslationService:
    """The process-wide service created in the app lifespan."""
    return request.app.state.translation_service
