"""Translation API: submit, cancel and inspect queued translations."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from translation_orchestrator.core.dependencies import get_translation_service
from translation_orchestrator.gateway.errors import (
    InvalidInputError,
    RequestCancelledError,
    TranslationError,
)
from translation_orchestrator.gateway.service import TranslationService
from translation_orchestrator.gateway.types import TranslationOptions
from translation_orchestrator.schemas.translation import (
    CancelResponse,
    QueueStatsResponse,
    ServiceStatusResponse,
    TranslateRequest,
    TranslateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/translation", tags=["translation"])


@router.post("/translate", response_model=TranslateResponse)
async def translate(
    body: TranslateRequest,
    service: TranslationService = Depends(get_translation_service),
):
    """Translate one piece of text, waiting for the queue to settle it."""
    options = TranslationOptions(
        max_retries=body.max_retries,
        priority=body.priority,
        use_queue=body.use_queue,
    )
    try:
        result = await service.translate_text(
            body.text,
            body.source_language,
            body.target_language,
            options,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except RequestCancelledError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except TranslationError as e:
        logger.warning("Translation failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))

    return TranslateResponse(**result.to_dict())


@router.delete("/queue/{request_id}", response_model=CancelResponse)
async def cancel_request(
    request_id: str,
    service: TranslationService = Depends(get_translation_service),
):
    if not service.cancel(request_id):
        raise HTTPException(status_code=404, detail="Request not found")
    return CancelResponse(cancelled=1)


@router.delete("/queue", response_model=CancelResponse)
async def cancel_all_requests(service: TranslationService = Depends(get_translation_service)):
    return CancelResponse(cancelled=service.cancel_all())


@router.get("/queue/stats", response_model=QueueStatsResponse)
async def queue_stats(service: TranslationService = Depends(get_translation_service)):
    return QueueStatsResponse(**service.get_queue_stats())


@router.get("/status", response_model=ServiceStatusResponse)
async def status(service: TranslationService = Depends(get_translation_service)):
    return ServiceStatusResponse(**service.get_status())


@router.delete("/cache", status_code=204)
async def clear_cache(service: TranslationService = Depends(get_translation_service)):
    service.clear_cache()
