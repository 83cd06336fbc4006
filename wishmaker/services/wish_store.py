"""Default persistence collaborators: save a finished draft, load a wish by slug."""

import logging
import uuid
from typing import Optional

from google.api_core.exceptions import AlreadyExists
from pydantic import ValidationError

from wishmaker.config import SLUG_MAX_ATTEMPTS, GCS_BUCKET_NAME
from wishmaker.errors import DataIntegrityError, PersistError, SlugCollisionError, TransportError
from wishmaker.models.wish import CompletedWishDraft, PersistResult, Wish
from wishmaker.services import firestore_client
from wishmaker.services.storage_client import delete_wish_photos, get_signed_url, upload_wish_photo
from wishmaker.tools.slug import generate_slug

logger = logging.getLogger(__name__)


def wish_document(draft: CompletedWishDraft, photo_urls: list[str]) -> dict:
    c = draft.customization
    return {
        "occasion": draft.occasion,
        "recipient_name": draft.recipient_name,
        "photo_urls": photo_urls,
        "greeting_text": draft.greeting_text,
        "personal_note": draft.personal_note,
        "template_id": draft.template_id,
        "festival_type": draft.festival_type,
        "wedding_type": draft.wedding_type,
        "custom_colors": {
            "background": c.background_color,
            "text": c.text_color,
            "accent": c.accent_color,
        },
        "font_family": c.font_family,
        "photo_layout": c.photo_layout,
    }


async def persist_wish(draft: CompletedWishDraft) -> PersistResult:
    """Store photos and the wish record; returns the slug it was saved under.

    A slug that is already taken is replaced by a freshly generated one, up to
    SLUG_MAX_ATTEMPTS times.
    """
    wish_id = str(uuid.uuid4())
    saved = False
    try:
        result = await _store_wish(wish_id, draft)
        saved = True
        return result
    finally:
        # Also runs when the caller cancels us (e.g. a wait_for timeout).
        if not saved:
            await _cleanup_photos(wish_id)


async def _store_wish(wish_id: str, draft: CompletedWishDraft) -> PersistResult:
    try:
        photo_urls = [
            await upload_wish_photo(wish_id, i, photo.data, photo.content_type)
            for i, photo in enumerate(draft.photos)
        ]
    except Exception as e:
        logger.error(f"Photo upload failed for wish {wish_id}: {e}")
        raise PersistError("Failed to upload photos") from e

    doc = wish_document(draft, photo_urls)
    for attempt in range(1, SLUG_MAX_ATTEMPTS + 1):
        slug = generate_slug(draft.occasion, draft.recipient_name)
        try:
            await firestore_client.create_wish(slug, doc, wish_id=wish_id)
        except AlreadyExists:
            logger.warning("Slug collision on %s (attempt %d/%d)", slug, attempt, SLUG_MAX_ATTEMPTS)
            continue
        except Exception as e:
            logger.error(f"Failed to save wish {wish_id}: {e}")
            raise PersistError("Failed to save wish") from e
        logger.info("Saved wish %s as %s", wish_id, slug)
        return PersistResult(slug=slug)

    raise SlugCollisionError(f"No free slug after {SLUG_MAX_ATTEMPTS} attempts")


async def _cleanup_photos(wish_id: str) -> None:
    try:
        await delete_wish_photos(wish_id)
    except Exception as e:
        logger.warning("Could not remove photos for unsaved wish %s: %s", wish_id, e)


async def fetch_wish_by_slug(slug: str) -> Optional[Wish]:
    """Exact-match lookup. None when no wish has this slug.

    Raises TransportError if the store cannot be reached and
    DataIntegrityError if the stored record is malformed.
    """
    try:
        data = await firestore_client.get_wish(slug)
    except Exception as e:
        logger.error(f"Wish fetch failed for {slug}: {e}")
        raise TransportError("Failed to load wish") from e
    if data is None:
        return None
    try:
        return Wish.model_validate(data)
    except ValidationError as e:
        raise DataIntegrityError(f"Malformed wish record {slug!r}") from e


async def with_signed_photo_urls(wish: Wish) -> Wish:
    """Copy of ``wish`` whose gs:// photo references are short-lived signed URLs."""
    prefix = f"gs://{GCS_BUCKET_NAME}/"
    urls = []
    for url in wish.photo_urls:
        if url.startswith(prefix):
            try:
                url = await get_signed_url(url)
            except Exception as e:
                logger.warning("Could not sign photo URL %s: %s", url, e)
        urls.append(url)
    return wish.model_copy(update={"photo_urls": urls})


async def fetch_signed_wish(slug: str) -> Optional[Wish]:
    wish = await fetch_wish_by_slug(slug)
    return await with_signed_photo_urls(wish) if wish else None
