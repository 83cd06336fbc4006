"""Pytest configuration and fixtures."""

import asyncio
import os

# Config is read at import time, so these must be set before wishmaker loads.
os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")
os.environ.setdefault("GCP_PROJECT_ID", "wishmaker-test")
os.environ.setdefault("GCS_BUCKET_NAME", "wishmaker-test-photos")
os.environ.setdefault("PUBLIC_BASE_URL", "https://wishes.example.com")
os.environ.setdefault("GREETING_BACKEND", "static")

import pytest

from wishmaker.agents.greeting_writer import generate_greeting_variations
from wishmaker.models.wish import GreetingVariation, PersistResult, PhotoBlob


class FakePersist:
    """Records every completed draft and hands back a fixed slug."""

    def __init__(self, slug: str = "amir-festival-ab12", error: Exception | None = None):
        self.slug = slug
        self.error = error
        self.drafts = []

    async def __call__(self, draft):
        self.drafts.append(draft)
        if self.error is not None:
            raise self.error
        return PersistResult(slug=self.slug)


class ScriptedGenerator:
    """Greeting generator whose n-th call sleeps ``delays[n]`` seconds.

    Each variation's text is tagged with the call number so tests can tell
    which request's result is on screen.
    """

    def __init__(self, delays=None, error: Exception | None = None):
        self.delays = list(delays or [])
        self.error = error
        self.calls = []

    async def __call__(self, recipient_name, occasion, personal_note,
                       festival_type=None, wedding_type=None):
        n = len(self.calls)
        self.calls.append((recipient_name, occasion, personal_note, festival_type, wedding_type))
        delay = self.delays[n] if n < len(self.delays) else 0
        if delay:
            await asyncio.sleep(delay)
        if self.error is not None:
            raise self.error
        return [
            GreetingVariation(id=style, style=style, text=f"call-{n} {style} for {recipient_name}")
            for style in ("formal", "casual", "poetic")
        ]


def photo(n: int, content_type: str = "image/png") -> PhotoBlob:
    return PhotoBlob(filename=f"photo{n}.png", content_type=content_type, data=f"image-{n}".encode())


@pytest.fixture
def fake_persist():
    return FakePersist()


@pytest.fixture
def static_generator():
    return generate_greeting_variations
