"""The wish creation wizard.

Five form steps (occasion, recipient, note, photos, review) followed by
three sub-screens (template, greeting, customize). Each screen enriches a
single :class:`WishDraft`; "Apply Customizations" hands the finished draft
to the persistence collaborator exactly once and the wizard ends in
``COMPLETE`` holding the new slug.

All state lives on the instance and is only touched from coroutines on
one event loop. Greeting requests are tagged by a :class:`RequestGate` so
a slow response can never overwrite a newer one.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional

from pydantic import BaseModel

from wishmaker.config import (
    GENERATION_TIMEOUT_SECONDS, MAX_PHOTOS, PERSIST_TIMEOUT_SECONDS,
)
from wishmaker.errors import ValidationBlockedError, WizardStateError
from wishmaker.flows.draft import DraftPhoto, WishDraft, make_preview
from wishmaker.flows.requests import RequestGate
from wishmaker.models.catalog import Template
from wishmaker.models.wish import (
    CompletedWishDraft, Customization, FestivalDetail, GreetingVariation, PersistResult,
    PhotoBlob, WeddingDetail, detail_for,
)
from wishmaker.services import catalog

logger = logging.getLogger(__name__)

GenerateVariations = Callable[..., Awaitable[list[GreetingVariation]]]
PersistWish = Callable[[CompletedWishDraft], Awaitable[PersistResult]]


class WizardStep(str, Enum):
    OCCASION = "occasion"
    RECIPIENT = "recipient"
    NOTE = "note"
    PHOTOS = "photos"
    REVIEW = "review"
    TEMPLATE_SELECT = "template_select"
    GREETING_SELECT = "greeting_select"
    CUSTOMIZE = "customize"
    COMPLETE = "complete"


FORM_STEPS = (
    WizardStep.OCCASION,
    WizardStep.RECIPIENT,
    WizardStep.NOTE,
    WizardStep.PHOTOS,
    WizardStep.REVIEW,
)

_BACK = {
    WizardStep.RECIPIENT: WizardStep.OCCASION,
    WizardStep.NOTE: WizardStep.RECIPIENT,
    WizardStep.PHOTOS: WizardStep.NOTE,
    WizardStep.REVIEW: WizardStep.PHOTOS,
    WizardStep.TEMPLATE_SELECT: WizardStep.REVIEW,
    WizardStep.GREETING_SELECT: WizardStep.TEMPLATE_SELECT,
    WizardStep.CUSTOMIZE: WizardStep.GREETING_SELECT,
}


class CustomizationPreview(BaseModel):
    occasion_title: str
    occasion_emoji: str
    template_name: Optional[str] = None
    recipient_name: str
    greeting: str
    background_color: str
    text_color: str
    accent_color: str
    font_family: str
    photo_layout: str
    photos: list[str] = []


class WishWizard:
    def __init__(
        self,
        generate_variations: Optional[GenerateVariations] = None,
        persist_wish: Optional[PersistWish] = None,
        generation_timeout: float = GENERATION_TIMEOUT_SECONDS,
        persist_timeout: float = PERSIST_TIMEOUT_SECONDS,
    ):
        if generate_variations is None:
            from wishmaker.agents.greeting_writer import get_greeting_generator
            generate_variations = get_greeting_generator()
        if persist_wish is None:
            from wishmaker.services.wish_store import persist_wish
        self._generate_variations = generate_variations
        self._persist_wish = persist_wish
        self.generation_timeout = generation_timeout
        self.persist_timeout = persist_timeout

        self.step = WizardStep.OCCASION
        self.draft: Optional[WishDraft] = WishDraft()

        self.variations: list[GreetingVariation] = []
        self.greetings_loading = False
        self.greeting_error: Optional[str] = None
        self.selected_variation_id: Optional[str] = None
        self.custom_message: Optional[str] = None  # None until the user opts in
        self._greeting_gate = RequestGate()

        self.saving = False
        self.save_error: Optional[str] = None
        self.slug: Optional[str] = None

    # ── helpers ───────────────────────────────────────────────

    def _require(self, *steps: WizardStep) -> WishDraft:
        if self.step not in steps:
            allowed = ", ".join(s.value for s in steps)
            raise WizardStateError(f"Not available on step {self.step.value!r} (needs {allowed})")
        return self.draft

    @property
    def step_number(self) -> Optional[int]:
        """1-5 on the form steps, None on the sub-screens."""
        if self.step in FORM_STEPS:
            return FORM_STEPS.index(self.step) + 1
        return None

    # ── step 1: occasion ──────────────────────────────────────

    def select_occasion(self, occasion_id: str) -> None:
        draft = self._require(WizardStep.OCCASION)
        if catalog.occasion_by_id(occasion_id) is None:
            raise ValueError(f"Unknown occasion: {occasion_id!r}")
        if draft.occasion != occasion_id:
            # A new occasion starts with no festival/wedding sub-type.
            draft.detail = detail_for(occasion_id)

    # ── step 2: recipient ─────────────────────────────────────

    def set_recipient_name(self, name: str) -> None:
        self._require(WizardStep.RECIPIENT).recipient_name = name

    @property
    def shows_festival_selector(self) -> bool:
        return self.draft is not None and isinstance(self.draft.detail, FestivalDetail)

    @property
    def shows_wedding_selector(self) -> bool:
        return self.draft is not None and isinstance(self.draft.detail, WeddingDetail)

    def select_festival_type(self, festival_id: Optional[str]) -> None:
        draft = self._require(WizardStep.RECIPIENT)
        if not isinstance(draft.detail, FestivalDetail):
            raise WizardStateError("Festival type only applies to festival wishes")
        if festival_id is not None and catalog.festival_by_id(festival_id) is None:
            raise ValueError(f"Unknown festival: {festival_id!r}")
        draft.detail = draft.detail.model_copy(update={"festival_type": festival_id})

    def select_wedding_type(self, wedding_type_id: Optional[str]) -> None:
        draft = self._require(WizardStep.RECIPIENT)
        if not isinstance(draft.detail, WeddingDetail):
            raise WizardStateError("Wedding type only applies to wedding wishes")
        if wedding_type_id is not None and catalog.wedding_type_by_id(wedding_type_id) is None:
            raise ValueError(f"Unknown wedding type: {wedding_type_id!r}")
        draft.detail = draft.detail.model_copy(update={"wedding_type": wedding_type_id})

    # ── step 3: note ──────────────────────────────────────────

    def set_personal_note(self, note: str) -> None:
        self._require(WizardStep.NOTE).personal_note = note

    # ── step 4: photos ────────────────────────────────────────

    async def add_photos(self, uploads: Iterable[PhotoBlob]) -> list[DraftPhoto]:
        """Attach photos up to the cap; files past the cap are ignored.

        Previews are rendered concurrently. Each preview is written onto the
        photo it belongs to, so the displayed order is always upload order.
        """
        draft = self._require(WizardStep.PHOTOS)
        accepted = [DraftPhoto(blob=blob) for blob in list(uploads)[:self.remaining_photo_slots]]
        draft.photos.extend(accepted)
        await asyncio.gather(*(self._render_preview(p) for p in accepted))
        return accepted

    async def _render_preview(self, photo: DraftPhoto) -> None:
        try:
            photo.preview = await asyncio.to_thread(make_preview, photo.blob)
        except Exception as e:
            logger.warning("Preview failed for %s: %s", photo.blob.filename, e)
            photo.preview_failed = True

    def remove_photo(self, index: int) -> DraftPhoto:
        draft = self._require(WizardStep.PHOTOS)
        if not 0 <= index < len(draft.photos):
            raise IndexError(f"No photo at index {index}")
        return draft.photos.pop(index)

    @property
    def remaining_photo_slots(self) -> int:
        if self.draft is None:
            return 0
        return max(0, MAX_PHOTOS - len(self.draft.photos))

    @property
    def can_add_photos(self) -> bool:
        return self.remaining_photo_slots > 0

    # ── step 5: review ────────────────────────────────────────

    def review_summary(self) -> dict:
        draft = self._require(WizardStep.REVIEW)
        occasion = catalog.occasion_by_id(draft.occasion)
        subtype = None
        if draft.festival_type:
            festival = catalog.festival_by_id(draft.festival_type)
            subtype = festival.name if festival else None
        elif draft.wedding_type:
            wedding = catalog.wedding_type_by_id(draft.wedding_type)
            subtype = wedding.name if wedding else None
        previews = [p.preview for p in draft.photos]
        return {
            "occasion": occasion.title,
            "occasion_emoji": occasion.emoji,
            "subtype": subtype,
            "recipient_name": draft.recipient_name,
            "personal_note": draft.personal_note or None,
            "photo_previews": previews[:3],
            "more_photos": max(0, len(previews) - 3),
        }

    # ── form navigation ───────────────────────────────────────

    def can_continue(self) -> bool:
        if self.step == WizardStep.RECIPIENT:
            return bool(self.draft.recipient_name.strip())
        return self.step in FORM_STEPS

    @property
    def continue_label(self) -> Optional[str]:
        if self.step == WizardStep.REVIEW:
            return "Choose Template"
        if self.step in FORM_STEPS:
            return "Continue"
        if self.step == WizardStep.GREETING_SELECT:
            return "Continue with Selected Message"
        if self.step == WizardStep.CUSTOMIZE:
            return "Apply Customizations"
        return None

    def continue_(self) -> WizardStep:
        """Advance one form step; from Review this opens template selection."""
        self._require(*FORM_STEPS)
        if not self.can_continue():
            raise ValidationBlockedError("Recipient name is required")
        if self.step == WizardStep.REVIEW:
            self.step = WizardStep.TEMPLATE_SELECT
        else:
            self.step = FORM_STEPS[FORM_STEPS.index(self.step) + 1]
        return self.step

    def can_go_back(self) -> bool:
        return self.step in _BACK and not self.saving

    def back(self) -> WizardStep:
        if not self.can_go_back():
            raise WizardStateError(f"No back step from {self.step.value!r}")
        if self.step == WizardStep.GREETING_SELECT:
            self._greeting_gate.invalidate()
            self.greetings_loading = False
        self.step = _BACK[self.step]
        return self.step

    # ── template selection ────────────────────────────────────

    def available_templates(self) -> tuple[Template, ...]:
        draft = self._require(WizardStep.TEMPLATE_SELECT)
        return catalog.templates_for(draft.occasion, draft.festival_type)

    async def select_template(self, template_id: str) -> WizardStep:
        """Choosing a template is the transition: greeting selection opens
        straight away and its variations are requested."""
        draft = self._require(WizardStep.TEMPLATE_SELECT)
        if template_id not in {t.id for t in self.available_templates()}:
            raise ValueError(f"Template {template_id!r} is not offered for this wish")
        draft.template_id = template_id
        self.step = WizardStep.GREETING_SELECT
        self.custom_message = None
        await self.request_greetings()
        return self.step

    # ── greeting selection ────────────────────────────────────

    async def request_greetings(self) -> bool:
        """Fetch three fresh variations, replacing anything shown before.

        Returns True when this request's result was applied. Failures and
        timeouts set ``greeting_error``; a response that arrives after a newer
        request was issued is dropped.
        """
        draft = self._require(WizardStep.GREETING_SELECT)
        request_id = self._greeting_gate.issue()
        self.greetings_loading = True
        self.greeting_error = None
        self.variations = []
        self.selected_variation_id = None

        try:
            variations = await asyncio.wait_for(
                self._generate_variations(
                    draft.recipient_name,
                    draft.occasion,
                    draft.personal_note,
                    draft.festival_type,
                    draft.wedding_type,
                ),
                timeout=self.generation_timeout,
            )
            if len(variations) != 3:
                raise ValueError(f"Expected 3 variations, got {len(variations)}")
        except Exception as e:
            if not self._greeting_gate.is_current(request_id):
                return False
            logger.error(f"Greeting request {request_id} failed: {e!r}")
            self.greeting_error = "Failed to generate greetings"
            self.greetings_loading = False
            return False

        if not self._greeting_gate.is_current(request_id):
            logger.info("Discarding stale greeting response %d", request_id)
            return False
        self.variations = list(variations)
        self.greetings_loading = False
        return True

    async def regenerate_greetings(self) -> bool:
        return await self.request_greetings()

    def select_variation(self, variation_id: str) -> None:
        self._require(WizardStep.GREETING_SELECT)
        if variation_id not in {v.id for v in self.variations}:
            raise ValueError(f"Unknown greeting variation: {variation_id!r}")
        self.selected_variation_id = variation_id
        self.custom_message = None

    def use_custom_message(self, text: str) -> None:
        self._require(WizardStep.GREETING_SELECT)
        self.custom_message = text
        self.selected_variation_id = None

    def can_confirm_greeting(self) -> bool:
        if self.step != WizardStep.GREETING_SELECT:
            return False
        if self.custom_message is not None:
            return bool(self.custom_message.strip())
        return self.selected_variation_id is not None

    def confirm_greeting(self) -> WizardStep:
        draft = self._require(WizardStep.GREETING_SELECT)
        if not self.can_confirm_greeting():
            raise ValidationBlockedError("Select a greeting or write your own message")
        if self.custom_message is not None:
            text = self.custom_message
        else:
            text = next(v.text for v in self.variations if v.id == self.selected_variation_id)
        draft.greeting_text = text
        draft.customization = draft.customization.model_copy(update={"custom_greeting": text})
        self._greeting_gate.invalidate()
        self.step = WizardStep.CUSTOMIZE
        return self.step

    # ── customization ─────────────────────────────────────────

    def update_customization(self, **changes) -> Customization:
        draft = self._require(WizardStep.CUSTOMIZE)
        if self.saving:
            raise WizardStateError("Customization is locked while the wish is being saved")
        unknown = set(changes) - set(Customization.model_fields)
        if unknown:
            raise ValueError(f"Unknown customization fields: {sorted(unknown)}")
        draft.customization = Customization.model_validate(
            {**draft.customization.model_dump(), **changes}
        )
        return draft.customization

    def apply_color_preset(self, name: str) -> Customization:
        preset = catalog.color_preset_by_name(name)
        if preset is None:
            raise ValueError(f"Unknown color preset: {name!r}")
        return self.update_customization(
            background_color=preset.background,
            text_color=preset.text,
            accent_color=preset.accent,
        )

    def preview(self) -> CustomizationPreview:
        """What the finished page looks like with the current edits."""
        draft = self._require(WizardStep.CUSTOMIZE)
        c = draft.customization
        occasion = catalog.occasion_by_id(draft.occasion)
        template = catalog.template_by_id(draft.template_id or "")
        previews = [p.preview for p in draft.photos if p.preview]
        return CustomizationPreview(
            occasion_title=occasion.title,
            occasion_emoji=occasion.emoji,
            template_name=template.name if template else None,
            recipient_name=draft.recipient_name,
            greeting=c.custom_greeting,
            background_color=c.background_color,
            text_color=c.text_color,
            accent_color=c.accent_color,
            font_family=c.font_family,
            photo_layout=c.photo_layout,
            photos=previews[:4] if c.photo_layout == "grid" else previews,
        )

    async def apply_customizations(self) -> Optional[str]:
        """Save the wish. Returns the slug, or None if saving failed.

        On success the draft is discarded and the wizard is COMPLETE. On
        failure it stays on Customize with ``save_error`` set so the user can
        try again.
        """
        draft = self._require(WizardStep.CUSTOMIZE)
        if self.saving:
            raise WizardStateError("Save already in progress")
        completed = draft.complete()

        self.saving = True
        self.save_error = None
        try:
            result = await asyncio.wait_for(self._persist_wish(completed), timeout=self.persist_timeout)
        except Exception as e:
            logger.error(f"Saving wish for {completed.recipient_name!r} failed: {e!r}")
            self.save_error = "Failed to save wish"
            return None
        finally:
            self.saving = False

        self.slug = result.slug
        self.draft = None
        self.step = WizardStep.COMPLETE
        return self.slug

    # ── serialization ─────────────────────────────────────────

    def snapshot(self) -> dict:
        data: dict = {
            "step": self.step.value,
            "step_number": self.step_number,
            "total_steps": len(FORM_STEPS),
            "can_continue": self.can_continue() if self.step in FORM_STEPS else False,
            "continue_label": self.continue_label,
            "can_go_back": self.can_go_back(),
            "slug": self.slug,
        }
        draft = self.draft
        if draft is None:
            return data

        data["draft"] = {
            "occasion": draft.occasion,
            "recipient_name": draft.recipient_name,
            "personal_note": draft.personal_note,
            "festival_type": draft.festival_type,
            "wedding_type": draft.wedding_type,
            "photos": [p.summary() for p in draft.photos],
            "template_id": draft.template_id,
            "greeting_text": draft.greeting_text,
        }
        if self.step == WizardStep.RECIPIENT:
            data["shows_festival_selector"] = self.shows_festival_selector
            data["shows_wedding_selector"] = self.shows_wedding_selector
        elif self.step == WizardStep.PHOTOS:
            data["can_add_photos"] = self.can_add_photos
        elif self.step == WizardStep.REVIEW:
            data["review"] = self.review_summary()
        elif self.step == WizardStep.TEMPLATE_SELECT:
            data["templates"] = [t.model_dump() for t in self.available_templates()]
        elif self.step == WizardStep.GREETING_SELECT:
            data.update({
                "variations": [v.model_dump() for v in self.variations],
                "greetings_loading": self.greetings_loading,
                "greeting_error": self.greeting_error,
                "selected_variation_id": self.selected_variation_id,
                "custom_message": self.custom_message,
                "can_confirm_greeting": self.can_confirm_greeting(),
            })
        elif self.step == WizardStep.CUSTOMIZE:
            data.update({
                "customization": draft.customization.model_dump(),
                "preview": self.preview().model_dump(),
                "saving": self.saving,
                "save_error": self.save_error,
            })
        return data
