import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from wishmaker.config import FETCH_TIMEOUT_SECONDS
from wishmaker.errors import DataIntegrityError, WizardStateError
from wishmaker.models.catalog import Occasion, Template
from wishmaker.models.wish import Wish
from wishmaker.services import catalog
from wishmaker.tools.share import ShareDialog, wish_url

logger = logging.getLogger(__name__)

FetchWish = Callable[[str], Awaitable[Optional[Wish]]]


class WishViewStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    UNKNOWN_OCCASION = "unknown_occasion"
    INVALID_RECORD = "invalid_record"


ERROR_MESSAGES = {
    WishViewStatus.NOT_FOUND: "Wish not found",
    WishViewStatus.FAILED: "Failed to load wish",
    WishViewStatus.UNKNOWN_OCCASION: "Unknown Occasion",
    WishViewStatus.INVALID_RECORD: "This wish could not be displayed",
}


class WishView:
    """A published wish, looked up once by its slug.

    ``load()`` fetches exactly once and never retries; every outcome other
    than READY is terminal for this view.
    """

    def __init__(self, slug: str, fetch_wish: Optional[FetchWish] = None,
                 on_back: Optional[Callable[[], None]] = None,
                 timeout: float = FETCH_TIMEOUT_SECONDS):
        if fetch_wish is None:
            from wishmaker.services.wish_store import fetch_signed_wish as fetch_wish
        self.slug = slug
        self._fetch_wish = fetch_wish
        self._on_back = on_back
        self.timeout = timeout

        self.status = WishViewStatus.LOADING
        self.wish: Optional[Wish] = None
        self.occasion: Optional[Occasion] = None
        self.template: Optional[Template] = None
        self.current_photo_index = 0
        self._loaded = False

    async def load(self) -> WishViewStatus:
        if self._loaded:
            return self.status
        self._loaded = True

        try:
            wish = await asyncio.wait_for(self._fetch_wish(self.slug), timeout=self.timeout)
        except DataIntegrityError as e:
            # The record exists but does not match the stored-wish schema.
            logger.error(f"Wish {self.slug} failed validation: {e!r}")
            self.status = WishViewStatus.INVALID_RECORD
            return self.status
        except Exception as e:
            logger.error(f"Error fetching wish {self.slug}: {e!r}")
            self.status = WishViewStatus.FAILED
            return self.status

        if wish is None:
            self.status = WishViewStatus.NOT_FOUND
            return self.status

        self.wish = wish
        self.occasion = catalog.occasion_by_id(wish.occasion)
        if self.occasion is None:
            logger.warning("Wish %s has unknown occasion %r", self.slug, wish.occasion)
            self.status = WishViewStatus.UNKNOWN_OCCASION
            return self.status

        self.template = catalog.template_by_id(wish.template_id)
        self.status = WishViewStatus.READY
        return self.status

    @property
    def error_message(self) -> Optional[str]:
        return ERROR_MESSAGES.get(self.status)

    @property
    def can_go_back(self) -> bool:
        return self._on_back is not None

    def go_back(self) -> None:
        if self._on_back is None:
            raise WizardStateError("This view has no back path")
        self._on_back()

    # ── photos ────────────────────────────────────────────────

    @property
    def photo_urls(self) -> list[str]:
        return self.wish.photo_urls if self.wish else []

    @property
    def has_carousel(self) -> bool:
        return len(self.photo_urls) > 1

    @property
    def current_photo(self) -> Optional[str]:
        urls = self.photo_urls
        return urls[self.current_photo_index] if urls else None

    def select_photo(self, index: int) -> str:
        """Jump to a photo from the carousel indicators. There is no
        auto-advance and no wrap-around."""
        if not 0 <= index < len(self.photo_urls):
            raise IndexError(f"No photo at index {index}")
        self.current_photo_index = index
        return self.photo_urls[index]

    # ── sharing ───────────────────────────────────────────────

    @property
    def url(self) -> str:
        return wish_url(self.slug)

    def share_dialog(self) -> ShareDialog:
        if self.status != WishViewStatus.READY:
            raise WizardStateError("Only a loaded wish can be shared")
        return ShareDialog(self.url, self.wish.recipient_name)

    def to_dict(self) -> dict:
        data = {
            "slug": self.slug,
            "status": self.status.value,
            "error": self.error_message,
            "can_go_back": self.can_go_back,
        }
        if self.status == WishViewStatus.READY:
            data.update({
                "wish": self.wish.model_dump(mode="json"),
                "occasion": self.occasion.model_dump(),
                "template": self.template.model_dump() if self.template else None,
                "url": self.url,
                "has_carousel": self.has_carousel,
                "current_photo_index": self.current_photo_index,
            })
        return data
