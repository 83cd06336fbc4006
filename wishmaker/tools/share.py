"""Share targets for a published wish page."""

import time
from typing import Callable, Optional
from urllib.parse import quote

from pydantic import BaseModel

from wishmaker.config import COPY_ACK_SECONDS, PUBLIC_BASE_URL


class ShareTarget(BaseModel):
    platform: str  # whatsapp | facebook | instagram
    url: Optional[str] = None  # None when the platform has no URL-share API
    message: str
    copy_text: Optional[str] = None  # text to place on the clipboard instead


def wish_url(slug: str, base_url: str = PUBLIC_BASE_URL) -> str:
    return f"{base_url.rstrip('/')}/wishes/{slug}"


def share_message(url: str, recipient_name: str) -> str:
    return f"🎉 Check out this special celebration website I created for {recipient_name}! {url}"


def whatsapp_target(url: str, recipient_name: str) -> ShareTarget:
    message = share_message(url, recipient_name)
    return ShareTarget(
        platform="whatsapp",
        url=f"https://wa.me/?text={quote(message, safe='')}",
        message=message,
    )


def facebook_target(url: str, recipient_name: str) -> ShareTarget:
    return ShareTarget(
        platform="facebook",
        url=f"https://www.facebook.com/sharer/sharer.php?u={quote(url, safe='')}",
        message=share_message(url, recipient_name),
    )


def instagram_target(url: str, recipient_name: str) -> ShareTarget:
    # Instagram has no web share endpoint; the link is copied for pasting.
    return ShareTarget(
        platform="instagram",
        message="Link copied! You can now paste it in your Instagram story or bio.",
        copy_text=url,
    )


def share_targets(url: str, recipient_name: str) -> list[ShareTarget]:
    return [
        whatsapp_target(url, recipient_name),
        facebook_target(url, recipient_name),
        instagram_target(url, recipient_name),
    ]


class CopyAcknowledgement:
    """Tracks the short "Copied!" window after a clipboard copy."""

    def __init__(self, window: float = COPY_ACK_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.window = window
        self._clock = clock
        self._copied_at: Optional[float] = None

    def copy(self, text: str) -> str:
        """Record a copy of ``text`` and return it for the clipboard."""
        self._copied_at = self._clock()
        return text

    @property
    def copied(self) -> bool:
        if self._copied_at is None:
            return False
        return self._clock() - self._copied_at < self.window


class ShareDialog:
    """State behind the share dialog for one wish URL."""

    def __init__(self, url: str, recipient_name: str,
                 clock: Callable[[], float] = time.monotonic):
        self.url = url
        self.recipient_name = recipient_name
        self.ack = CopyAcknowledgement(clock=clock)

    def copy_link(self) -> str:
        return self.ack.copy(self.url)

    def targets(self) -> list[ShareTarget]:
        return share_targets(self.url, self.recipient_name)

    def share_to(self, platform: str) -> ShareTarget:
        target = next((t for t in self.targets() if t.platform == platform), None)
        if target is None:
            raise ValueError(f"Unknown share platform: {platform!r}")
        if target.copy_text is not None:
            self.ack.copy(target.copy_text)
        return target

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "copied": self.ack.copied,
            "targets": [t.model_dump() for t in self.targets()],
        }
