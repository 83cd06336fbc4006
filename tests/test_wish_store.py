"""Tests for saving and loading wishes (Firestore and GCS are mocked)."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from google.api_core.exceptions import AlreadyExists, ServiceUnavailable

from conftest import photo
from wishmaker.errors import DataIntegrityError, PersistError, SlugCollisionError, TransportError
from wishmaker.models.wish import CompletedWishDraft, Customization, Wish
from wishmaker.services import wish_store

STORE = "wishmaker.services.wish_store"
FIRESTORE = "wishmaker.services.firestore_client"


def completed(photos=2) -> CompletedWishDraft:
    return CompletedWishDraft(
        occasion="festival",
        recipient_name="Amir",
        personal_note="xo",
        festival_type="diwali",
        template_id="diwali-diyas",
        greeting_text="Happy Diwali!",
        customization=Customization(background_color="#000000", font_family="Poppins", photo_layout="slider"),
        photos=tuple(photo(i) for i in range(photos)),
    )


def stored_record(**overrides) -> dict:
    record = {
        "id": "w-1",
        "occasion": "festival",
        "recipient_name": "Amir",
        "photo_urls": ["gs://wishmaker-test-photos/wishes/w-1/photo_0_abc.png", "https://cdn.example.com/x.png"],
        "generated_slug": "amir-festival-ab12",
        "greeting_text": "Happy Diwali!",
        "template_id": "diwali-diyas",
        "festival_type": "diwali",
    }
    record.update(overrides)
    return record


@pytest.fixture
def upload():
    async def fake_upload(wish_id, index, data, mime):
        return f"gs://wishmaker-test-photos/wishes/{wish_id}/photo_{index}.png"

    with patch(f"{STORE}.upload_wish_photo", side_effect=fake_upload) as mock:
        yield mock


@pytest.fixture
def delete_photos():
    with patch(f"{STORE}.delete_wish_photos", new_callable=AsyncMock, return_value=0) as mock:
        yield mock


class TestPersistWish:

    @pytest.mark.asyncio
    async def test_saves_document_under_generated_slug(self, upload, delete_photos):
        with patch(f"{FIRESTORE}.create_wish", new_callable=AsyncMock) as create, \
                patch(f"{STORE}.generate_slug", return_value="amir-festival-ab12"):
            result = await wish_store.persist_wish(completed())

        assert result.slug == "amir-festival-ab12"
        slug, doc = create.call_args.args
        assert slug == "amir-festival-ab12"
        assert doc["occasion"] == "festival"
        assert doc["festival_type"] == "diwali"
        assert doc["wedding_type"] is None
        assert doc["custom_colors"] == {"background": "#000000", "text": "#1f2937", "accent": "#8b5cf6"}
        assert doc["font_family"] == "Poppins"
        assert doc["photo_layout"] == "slider"
        assert len(doc["photo_urls"]) == 2
        assert all(u.startswith("gs://wishmaker-test-photos/") for u in doc["photo_urls"])
        delete_photos.assert_not_called()

    @pytest.mark.asyncio
    async def test_photos_uploaded_in_order_under_one_wish_id(self, upload, delete_photos):
        with patch(f"{FIRESTORE}.create_wish", new_callable=AsyncMock) as create:
            await wish_store.persist_wish(completed(photos=3))

        wish_ids = {c.args[0] for c in upload.call_args_list}
        assert len(wish_ids) == 1
        assert [c.args[1] for c in upload.call_args_list] == [0, 1, 2]
        assert [c.args[2] for c in upload.call_args_list] == [b"image-0", b"image-1", b"image-2"]
        assert create.call_args.kwargs["wish_id"] in wish_ids

    @pytest.mark.asyncio
    async def test_collision_retries_with_fresh_slug(self, upload, delete_photos):
        create = AsyncMock(side_effect=[AlreadyExists("taken"), "w-1"])
        with patch(f"{FIRESTORE}.create_wish", create), \
                patch(f"{STORE}.generate_slug", side_effect=["amir-festival-aaaa", "amir-festival-bbbb"]):
            result = await wish_store.persist_wish(completed())

        assert result.slug == "amir-festival-bbbb"
        assert [c.args[0] for c in create.call_args_list] == ["amir-festival-aaaa", "amir-festival-bbbb"]
        assert upload.call_count == 2
        delete_photos.assert_not_called()

    @pytest.mark.asyncio
    async def test_gives_up_after_repeated_collisions(self, upload, delete_photos):
        create = AsyncMock(side_effect=AlreadyExists("taken"))
        with patch(f"{FIRESTORE}.create_wish", create):
            with pytest.raises(SlugCollisionError):
                await wish_store.persist_wish(completed())

        assert create.call_count == wish_store.SLUG_MAX_ATTEMPTS
        delete_photos.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_store_failure_cleans_up_photos(self, upload, delete_photos):
        create = AsyncMock(side_effect=ServiceUnavailable("down"))
        with patch(f"{FIRESTORE}.create_wish", create):
            with pytest.raises(PersistError):
                await wish_store.persist_wish(completed())
        delete_photos.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_upload_failure_never_writes_record(self, delete_photos):
        create = AsyncMock()
        with patch(f"{STORE}.upload_wish_photo", AsyncMock(side_effect=OSError("quota"))), \
                patch(f"{FIRESTORE}.create_wish", create):
            with pytest.raises(PersistError):
                await wish_store.persist_wish(completed())
        create.assert_not_called()
        delete_photos.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timeout_mid_upload_cleans_up_photos(self, delete_photos):
        async def second_upload_hangs(wish_id, index, data, mime):
            if index == 1:
                await asyncio.sleep(1)
            return f"gs://wishmaker-test-photos/wishes/{wish_id}/photo_{index}.png"

        create = AsyncMock()
        with patch(f"{STORE}.upload_wish_photo", side_effect=second_upload_hangs), \
                patch(f"{FIRESTORE}.create_wish", create):
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(wish_store.persist_wish(completed()), timeout=0.05)

        delete_photos.assert_awaited_once()
        create.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancelled_save_cleans_up_photos(self, upload, delete_photos):
        async def hang(*args, **kwargs):
            await asyncio.sleep(1)

        with patch(f"{FIRESTORE}.create_wish", side_effect=hang):
            task = asyncio.create_task(wish_store.persist_wish(completed()))
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        delete_photos.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cleanup_failure_does_not_mask_original_error(self, upload):
        with patch(f"{FIRESTORE}.create_wish", AsyncMock(side_effect=ServiceUnavailable("down"))), \
                patch(f"{STORE}.delete_wish_photos", AsyncMock(side_effect=OSError("gcs down"))):
            with pytest.raises(PersistError):
                await wish_store.persist_wish(completed())


class TestFetchWish:

    @pytest.mark.asyncio
    async def test_missing_slug_is_none(self):
        with patch(f"{FIRESTORE}.get_wish", AsyncMock(return_value=None)):
            assert await wish_store.fetch_wish_by_slug("nobody-birthday-0000") is None

    @pytest.mark.asyncio
    async def test_record_becomes_wish(self):
        with patch(f"{FIRESTORE}.get_wish", AsyncMock(return_value=stored_record())) as get:
            wish = await wish_store.fetch_wish_by_slug("amir-festival-ab12")
        get.assert_awaited_once_with("amir-festival-ab12")
        assert isinstance(wish, Wish)
        assert wish.recipient_name == "Amir"
        assert wish.festival_type == "diwali"

    @pytest.mark.asyncio
    async def test_unknown_occasion_still_loads(self):
        with patch(f"{FIRESTORE}.get_wish", AsyncMock(return_value=stored_record(occasion="graduation"))):
            wish = await wish_store.fetch_wish_by_slug("amir-festival-ab12")
        assert wish.occasion == "graduation"

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        with patch(f"{FIRESTORE}.get_wish", AsyncMock(side_effect=ServiceUnavailable("down"))):
            with pytest.raises(TransportError):
                await wish_store.fetch_wish_by_slug("amir-festival-ab12")

    @pytest.mark.asyncio
    async def test_malformed_record(self):
        record = stored_record()
        del record["recipient_name"]
        with patch(f"{FIRESTORE}.get_wish", AsyncMock(return_value=record)):
            with pytest.raises(DataIntegrityError):
                await wish_store.fetch_wish_by_slug("amir-festival-ab12")

    @pytest.mark.asyncio
    async def test_signed_urls_only_for_own_bucket(self):
        sign = AsyncMock(return_value="https://storage.googleapis.com/signed")
        with patch(f"{FIRESTORE}.get_wish", AsyncMock(return_value=stored_record())), \
                patch(f"{STORE}.get_signed_url", sign):
            wish = await wish_store.fetch_signed_wish("amir-festival-ab12")

        assert wish.photo_urls == ["https://storage.googleapis.com/signed", "https://cdn.example.com/x.png"]
        sign.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_signing_failure_keeps_reference(self):
        with patch(f"{FIRESTORE}.get_wish", AsyncMock(return_value=stored_record())), \
                patch(f"{STORE}.get_signed_url", AsyncMock(side_effect=OSError("no creds"))):
            wish = await wish_store.fetch_signed_wish("amir-festival-ab12")
        assert wish.photo_urls[0].startswith("gs://")

    @pytest.mark.asyncio
    async def test_signed_fetch_of_missing_slug(self):
        with patch(f"{FIRESTORE}.get_wish", AsyncMock(return_value=None)):
            assert await wish_store.fetch_signed_wish("nobody-birthday-0000") is None
