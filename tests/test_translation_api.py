"""Tests for the translation HTTP API."""

import asyncio

import pytest

from translation_orchestrator.gateway.errors import ProviderHttpError


def _http_error(status: int, provider: str = "google") -> ProviderHttpError:
    return ProviderHttpError(f"Google Translate API error: {status}", provider=provider, status_code=status)


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["queue_length"] == 0


@pytest.mark.asyncio
async def test_translate(client, fake_client):
    response = await client.post(
        "/api/v1/translation/translate",
        json={"text": "Hello", "source_language": "en", "target_language": "es"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["translated_text"] == "Hello-translated"
    assert data["provider"] == "google"
    assert data["cached"] is False
    assert len(fake_client.calls) == 1


@pytest.mark.asyncio
async def test_translate_second_call_cached(client, fake_client):
    body = {"text": "Hello", "source_language": "en", "target_language": "es"}
    await client.post("/api/v1/translation/translate", json=body)
    response = await client.post("/api/v1/translation/translate", json=body)

    assert response.status_code == 200
    assert response.json()["cached"] is True
    assert len(fake_client.calls) == 1


@pytest.mark.asyncio
async def test_translate_direct(client, service):
    response = await client.post(
        "/api/v1/translation/translate",
        json={"text": "Hello", "source_language": "en", "target_language": "de", "use_queue": False},
    )
    assert response.status_code == 200
    assert response.json()["translated_text"] == "Hello-translated"
    assert len(service.queue) == 0


@pytest.mark.asyncio
async def test_translate_same_language(client, fake_client):
    response = await client.post(
        "/api/v1/translation/translate",
        json={"text": "Hello", "source_language": "en", "target_language": "en"},
    )
    assert response.status_code == 200
    assert response.json()["provider"] == "none"
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_translate_empty_text(client):
    response = await client.post("/api/v1/translation/translate", json={"text": ""})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_translate_unknown_language(client):
    response = await client.post(
        "/api/v1/translation/translate",
        json={"text": "Hello", "source_language": "en", "target_language": "xx"},
    )
    assert response.status_code == 422
    assert "target language" in response.json()["detail"]


@pytest.mark.asyncio
async def test_translate_provider_failure(client, fake_client):
    fake_client.outcomes = [_http_error(401)]
    response = await client.post(
        "/api/v1/translation/translate",
        json={"text": "Hello", "source_language": "en", "target_language": "es"},
    )
    assert response.status_code == 502
    assert "Translation failed after 1 attempts" in response.json()["detail"]


@pytest.mark.asyncio
async def test_translate_cancelled(client, fake_client):
    fake_client.gate = asyncio.Event()
    pending = asyncio.create_task(
        client.post(
            "/api/v1/translation/translate",
            json={"text": "Hello", "source_language": "en", "target_language": "es"},
        )
    )
    await fake_client.started.wait()

    cancel = await client.delete("/api/v1/translation/queue")
    fake_client.gate.set()
    response = await pending

    assert cancel.json() == {"cancelled": 1}
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_cancel_unknown_request(client):
    response = await client.delete("/api/v1/translation/queue/doesnotexist")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cancel_queued_request(client, service):
    await service.processor.stop()
    req = service.enqueue_translation("Hello", "en", "es")

    response = await client.delete(f"/api/v1/translation/queue/{req.id}")

    assert response.status_code == 200
    assert response.json() == {"cancelled": 1}
    assert req.done


@pytest.mark.asyncio
async def test_cancel_all_empty(client):
    response = await client.delete("/api/v1/translation/queue")
    assert response.status_code == 200
    assert response.json() == {"cancelled": 0}


@pytest.mark.asyncio
async def test_queue_stats(client, service):
    await service.processor.stop()
    service.enqueue_translation("Hello", "en", "es")

    response = await client.get("/api/v1/translation/queue/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["queue_length"] == 1
    assert data["pending_retries"] == 0


@pytest.mark.asyncio
async def test_status(client):
    response = await client.get("/api/v1/translation/status")
    assert response.status_code == 200
    data = response.json()
    assert data["current_provider"] == "google"
    assert [p["name"] for p in data["providers"]] == ["google", "libre"]
    assert data["providers"][1]["rate_limit_per_minute"] == 60


@pytest.mark.asyncio
async def test_clear_cache(client, service):
    service.cache.put("en", "es", "Hello", "Hola")
    response = await client.delete("/api/v1/translation/cache")
    assert response.status_code == 204
    assert service.cache.size == 0


@pytest.mark.asyncio
async def test_metrics(client):
    await client.get("/api/v1/health")
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text
