"""Test configuration."""

import os
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from content_core.content.manager import ContentManager
from content_core.content.signals import ShapeRender, Signal
from content_core.core.bus import EventBus
from content_core.core.config import Settings
from content_core.core.logging import configure_logging
from content_core.main import create_app
from content_core.placement.zones import ZonePlacementStrategy
from content_core.stores.memory import InMemoryContentStore

# Load .env.test for test-specific configuration when present
try:
    from dotenv import load_dotenv

    env_test_file = Path(__file__).parent.parent / ".env.test"
    if env_test_file.exists():
        load_dotenv(env_test_file, override=True)
except ImportError:
    # dotenv not available, skip loading
    pass

os.environ.setdefault("TESTING", "true")
configure_logging(testing=True)


class TextRenderer:
    """Writes each item's text, or a literal shape's text, into the stream."""

    def attach(self, bus: EventBus) -> "TextRenderer":
        bus.on(Signal.SHAPE_RENDER, self.render)
        return self

    def render(self, payload: ShapeRender) -> None:
        stream = payload.render_stream
        for shape in payload.shape.walk():
            if shape.is_item_promise:
                assert stream.content_manager is not None
                item = stream.content_manager.get_available_item(shape.id)
                stream.write(f"<{shape.display_type or 'full'}>{item['text']}</>")
            elif "text" in shape.data:
                stream.write(shape.data["text"])


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a short fetch timeout."""
    return Settings(CONTENT_FETCH_TIMEOUT=1.0)


@pytest.fixture
def bus() -> EventBus:
    """Fresh application bus."""
    return EventBus()


@pytest.fixture
def memory_store(bus: EventBus) -> InMemoryContentStore:
    """In-memory store attached to the bus with two items."""
    return InMemoryContentStore(
        {"a": {"text": "Alpha"}, "b": {"text": "Beta"}}
    ).attach(bus)


@pytest.fixture
def manager(bus: EventBus, test_settings: Settings) -> ContentManager:
    """Content manager on a request scope of the application bus."""
    return ContentManager(bus.scope(), settings=test_settings)


@pytest.fixture
def content_app(
    bus: EventBus, memory_store: InMemoryContentStore, test_settings: Settings
) -> FastAPI:
    """Application wired with a store, zone placement and a text renderer."""
    ZonePlacementStrategy().attach(bus)
    TextRenderer().attach(bus)
    return create_app(settings=test_settings, bus=bus)


@pytest_asyncio.fixture
async def content_client(content_app: FastAPI) -> AsyncGenerator[AsyncClient, Any]:
    """Async client for the content application."""
    async with AsyncClient(
        transport=ASGITransport(app=content_app),
        base_url="http://test",
    ) as client:
        yield client
