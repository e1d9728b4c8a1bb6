"""End-to-end tests for the content application."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from content_core.core.bus import EventBus
from content_core.main import create_app
from content_core.stores.memory import InMemoryContentStore

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_should_render_requested_items(content_client: AsyncClient) -> None:
    """Items are fetched in one round and rendered in request order."""
    response = await content_client.get(
        "/api/v1/pages", params=[("id", "b"), ("id", "a"), ("display_type", "summary")]
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert response.text == "<summary>Beta</><summary>Alpha</>"
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_should_fetch_duplicate_ids_once(
    content_client: AsyncClient, memory_store: InMemoryContentStore
) -> None:
    response = await content_client.get("/api/v1/pages", params=[("id", "a"), ("id", "a")])

    assert response.text == "<full>Alpha</><full>Alpha</>"
    assert memory_store.requests_seen == 1


@pytest.mark.asyncio
async def test_should_report_missing_items(content_client: AsyncClient) -> None:
    """A page with unknown items is an error naming them, never a page with holes."""
    response = await content_client.get("/api/v1/pages", params=[("id", "a"), ("id", "nope")])

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "UnresolvedItemsError"
    assert data["item_ids"] == ["nope"]
    assert data["correlation_id"] == response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_should_not_share_items_between_requests(
    content_client: AsyncClient, memory_store: InMemoryContentStore
) -> None:
    """Nothing is cached across requests."""
    await content_client.get("/api/v1/pages", params={"id": "a"})
    await content_client.get("/api/v1/pages", params={"id": "a"})

    assert memory_store.requests_seen == 2


@pytest.mark.asyncio
async def test_should_render_empty_page(content_client: AsyncClient) -> None:
    response = await content_client.get("/api/v1/pages")

    assert response.status_code == 200
    assert response.text == ""


@pytest.mark.asyncio
async def test_should_expose_metrics(content_client: AsyncClient) -> None:
    await content_client.get("/api/v1/pages", params={"id": "a"})

    response = await content_client.get("/metrics")

    assert response.status_code == 200
    assert "content_fetch_cycles_total" in response.text
    assert "content_pages_rendered_total" in response.text


def test_should_attach_default_placement_without_bus() -> None:
    app = create_app()

    assert isinstance(app, FastAPI)
    assert isinstance(app.state.bus, EventBus)
    assert app.state.bus.listener_count("content.shape-placement") == 1
    assert app.state.bus.listener_count("content.request-start") == 1


@pytest.mark.asyncio
async def test_should_serve_registered_stores(test_settings) -> None:
    bus = EventBus()
    InMemoryContentStore({"x": {"text": "X"}}).attach(bus)
    app = create_app(settings=test_settings, bus=bus)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/pages", params={"id": "x"})

    # No renderer is subscribed, so the page is empty but complete
    assert response.status_code == 200
    assert response.text == ""
