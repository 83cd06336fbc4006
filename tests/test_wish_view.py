"""Tests for the published wish page."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from wishmaker.errors import DataIntegrityError, TransportError, WizardStateError
from wishmaker.flows.wish_view import WishView, WishViewStatus
from wishmaker.models.wish import Wish


def make_wish(**overrides) -> Wish:
    data = {
        "id": "w-1",
        "occasion": "festival",
        "recipient_name": "Amir",
        "photo_urls": ["https://img/0.png", "https://img/1.png", "https://img/2.png"],
        "generated_slug": "amir-festival-ab12",
        "greeting_text": "Happy Diwali!",
        "template_id": "diwali-diyas",
        "festival_type": "diwali",
    }
    data.update(overrides)
    return Wish(**data)


class TestLoad:

    @pytest.mark.asyncio
    async def test_ready(self):
        fetch = AsyncMock(return_value=make_wish())
        view = WishView("amir-festival-ab12", fetch_wish=fetch)
        assert view.status == WishViewStatus.LOADING

        assert await view.load() == WishViewStatus.READY
        fetch.assert_awaited_once_with("amir-festival-ab12")
        assert view.occasion.title == "Festival"
        assert view.template.name == "Diwali Diyas"
        assert view.error_message is None

    @pytest.mark.asyncio
    async def test_not_found(self):
        view = WishView("nobody-birthday-0000", fetch_wish=AsyncMock(return_value=None))
        assert await view.load() == WishViewStatus.NOT_FOUND
        assert view.error_message == "Wish not found"
        assert view.wish is None

    @pytest.mark.asyncio
    async def test_failed(self):
        view = WishView("amir-festival-ab12", fetch_wish=AsyncMock(side_effect=TransportError("down")))
        assert await view.load() == WishViewStatus.FAILED
        assert view.error_message == "Failed to load wish"

    @pytest.mark.asyncio
    async def test_malformed_record_is_not_a_transport_failure(self):
        view = WishView("amir-festival-ab12", fetch_wish=AsyncMock(side_effect=DataIntegrityError("bad record")))
        assert await view.load() == WishViewStatus.INVALID_RECORD
        assert view.error_message == "This wish could not be displayed"
        assert view.wish is None

    @pytest.mark.asyncio
    async def test_unknown_occasion(self):
        view = WishView("amir-grad-ab12", fetch_wish=AsyncMock(return_value=make_wish(occasion="graduation")))
        assert await view.load() == WishViewStatus.UNKNOWN_OCCASION
        assert view.error_message == "Unknown Occasion"

    @pytest.mark.asyncio
    async def test_missing_template_still_ready(self):
        view = WishView("amir-festival-ab12", fetch_wish=AsyncMock(return_value=make_wish(template_id="retired")))
        assert await view.load() == WishViewStatus.READY
        assert view.template is None
        assert view.to_dict()["template"] is None

    @pytest.mark.asyncio
    async def test_fetches_exactly_once(self):
        fetch = AsyncMock(side_effect=TransportError("down"))
        view = WishView("amir-festival-ab12", fetch_wish=fetch)
        await view.load()
        await view.load()
        assert fetch.await_count == 1
        assert view.status == WishViewStatus.FAILED

    @pytest.mark.asyncio
    async def test_timeout_is_a_failure(self):
        async def hang(slug):
            await asyncio.sleep(1)

        view = WishView("amir-festival-ab12", fetch_wish=hang, timeout=0.01)
        assert await view.load() == WishViewStatus.FAILED


class TestPhotos:

    @pytest.mark.asyncio
    async def test_carousel_navigation(self):
        view = WishView("s", fetch_wish=AsyncMock(return_value=make_wish()))
        await view.load()

        assert view.has_carousel
        assert view.current_photo == "https://img/0.png"
        assert view.select_photo(2) == "https://img/2.png"
        assert view.current_photo_index == 2
        with pytest.raises(IndexError):
            view.select_photo(3)
        assert view.current_photo_index == 2

    @pytest.mark.asyncio
    async def test_single_photo_has_no_carousel(self):
        view = WishView("s", fetch_wish=AsyncMock(return_value=make_wish(photo_urls=["https://img/0.png"])))
        await view.load()
        assert not view.has_carousel
        assert view.current_photo == "https://img/0.png"

    @pytest.mark.asyncio
    async def test_no_photos(self):
        view = WishView("s", fetch_wish=AsyncMock(return_value=make_wish(photo_urls=[])))
        await view.load()
        assert view.current_photo is None
        assert not view.has_carousel


class TestNavigationAndShare:

    def test_back_calls_handler(self):
        on_back = MagicMock()
        view = WishView("s", fetch_wish=AsyncMock(), on_back=on_back)
        assert view.can_go_back
        view.go_back()
        on_back.assert_called_once_with()

    def test_no_back_handler(self):
        view = WishView("s", fetch_wish=AsyncMock())
        assert not view.can_go_back
        with pytest.raises(WizardStateError):
            view.go_back()

    @pytest.mark.asyncio
    async def test_share_dialog_for_loaded_wish(self):
        view = WishView("amir-festival-ab12", fetch_wish=AsyncMock(return_value=make_wish()))
        await view.load()

        dialog = view.share_dialog()
        assert dialog.url == "https://wishes.example.com/wishes/amir-festival-ab12"
        assert dialog.recipient_name == "Amir"

    @pytest.mark.asyncio
    async def test_share_needs_a_loaded_wish(self):
        view = WishView("s", fetch_wish=AsyncMock(return_value=None))
        await view.load()
        with pytest.raises(WizardStateError):
            view.share_dialog()

    @pytest.mark.asyncio
    async def test_to_dict(self):
        view = WishView("amir-festival-ab12", fetch_wish=AsyncMock(return_value=make_wish()))
        assert view.to_dict()["status"] == "loading"
        await view.load()
        data = view.to_dict()
        assert data["status"] == "ready"
        assert data["wish"]["recipient_name"] == "Amir"
        assert data["url"].endswith("/wishes/amir-festival-ab12")
        assert data["has_carousel"] is True
