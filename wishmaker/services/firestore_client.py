import uuid
from datetime import datetime, timezone
from typing import Optional
from google.cloud import firestore
from google.cloud.firestore_v1.async_client import AsyncClient
from wishmaker.config import WISHES_COLLECTION

_client: Optional[AsyncClient] = None

def get_client() -> AsyncClient:
    global _client
    if _client is None:
        _client = firestore.AsyncClient()
    return _client

# ── Wish operations ───────────────────────────────────────────
# Wish documents are keyed by their slug, so a slug lookup is a single
# document read and a duplicate slug is rejected by create().

async def create_wish(slug: str, data: dict, wish_id: Optional[str] = None) -> str:
    """Create the wish document for ``slug``.

    Raises google.api_core.exceptions.AlreadyExists if the slug is taken.
    """
    db = get_client()
    wish_id = wish_id or str(uuid.uuid4())
    doc = {
        **data,
        "id": wish_id,
        "generated_slug": slug,
        "created_at": datetime.now(timezone.utc),
    }
    await db.collection(WISHES_COLLECTION).document(slug).create(doc)
    return wish_id

async def get_wish(slug: str) -> Optional[dict]:
    db = get_client()
    doc = await db.collection(WISHES_COLLECTION).document(slug).get()
    return doc.to_dict() if doc.exists else None
