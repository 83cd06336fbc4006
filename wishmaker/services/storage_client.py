import uuid
import asyncio
from datetime import timedelta
from typing import Optional
from google.cloud import storage
from wishmaker.config import GCS_BUCKET_NAME

_storage_client: Optional[storage.Client] = None

def get_storage_client() -> storage.Client:
    global _storage_client
    if _storage_client is None:
        _storage_client = storage.Client()
    return _storage_client

def get_bucket() -> storage.Bucket:
    return get_storage_client().bucket(GCS_BUCKET_NAME)

def _extension(mime_type: str) -> str:
    if "png" in mime_type:
        return "png"
    if "webp" in mime_type:
        return "webp"
    if "gif" in mime_type:
        return "gif"
    return "jpg"

async def upload_wish_photo(wish_id: str, index: int, file_bytes: bytes,
                            mime_type: str) -> str:
    """Upload one wish photo. Returns the durable gs:// URI.

    Signed URLs are generated at read time via get_signed_url() so the stored
    reference never expires.
    """
    blob_path = f"wishes/{wish_id}/photo_{index}_{uuid.uuid4().hex[:8]}.{_extension(mime_type)}"
    bucket = get_bucket()
    blob = bucket.blob(blob_path)

    loop = asyncio.get_running_loop()
    await loop.run_in_executor(
        None,
        lambda: blob.upload_from_string(file_bytes, content_type=mime_type),
    )
    return f"gs://{GCS_BUCKET_NAME}/{blob_path}"

async def delete_wish_photos(wish_id: str) -> int:
    """Remove every photo stored for a wish. Returns the number deleted."""
    bucket = get_bucket()
    loop = asyncio.get_running_loop()
    blobs = await loop.run_in_executor(
        None,
        lambda: list(bucket.list_blobs(prefix=f"wishes/{wish_id}/")),
    )
    for blob in blobs:
        await loop.run_in_executor(None, blob.delete)
    return len(blobs)

async def get_signed_url(gcs_uri: str) -> str:
    """Convert a gs:// URI to a 1-hour signed URL for serving."""
    prefix = f"gs://{GCS_BUCKET_NAME}/"
    if not gcs_uri.startswith(prefix):
        raise ValueError(f"Invalid GCS URI for bucket {GCS_BUCKET_NAME!r}: {gcs_uri!r}")
    blob_path = gcs_uri[len(prefix):]
    bucket = get_bucket()
    blob = bucket.blob(blob_path)
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None,
        lambda: blob.generate_signed_url(expiration=timedelta(hours=1), method="GET")
    )
