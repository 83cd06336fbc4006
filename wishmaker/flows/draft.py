import base64
import uuid
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List

from wishmaker.errors import ValidationBlockedError
from wishmaker.models.wish import (
    BirthdayDetail, CompletedWishDraft, Customization, OccasionDetail, PhotoBlob,
    festival_type_of, wedding_type_of,
)


def make_preview(blob: PhotoBlob) -> str:
    """Displayable data: URL for an uploaded photo."""
    encoded = base64.b64encode(blob.data).decode("ascii")
    return f"data:{blob.content_type or 'application/octet-stream'};base64,{encoded}"


class DraftPhoto(BaseModel):
    photo_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    blob: PhotoBlob
    preview: Optional[str] = None
    preview_failed: bool = False

    def summary(self) -> dict:
        return {
            "photo_id": self.photo_id,
            "filename": self.blob.filename,
            "content_type": self.blob.content_type,
            "preview": self.preview,
            "preview_failed": self.preview_failed,
        }


class WishDraft(BaseModel):
    """In-progress wish owned by a single wizard."""
    model_config = ConfigDict(validate_assignment=True)

    detail: OccasionDetail = Field(default_factory=BirthdayDetail)
    recipient_name: str = ""
    personal_note: str = ""
    photos: List[DraftPhoto] = []
    template_id: Optional[str] = None
    greeting_text: str = ""
    customization: Customization = Field(default_factory=Customization)

    @property
    def occasion(self) -> str:
        return self.detail.kind

    @property
    def festival_type(self) -> Optional[str]:
        return festival_type_of(self.detail)

    @property
    def wedding_type(self) -> Optional[str]:
        return wedding_type_of(self.detail)

    @property
    def final_greeting(self) -> str:
        # Text edited on the Customize step wins over the selected greeting.
        edited = self.customization.custom_greeting
        return edited if edited.strip() else self.greeting_text

    def complete(self) -> CompletedWishDraft:
        if not self.recipient_name.strip():
            raise ValidationBlockedError("Recipient name is required")
        if not self.template_id:
            raise ValidationBlockedError("A template must be selected")
        if not self.final_greeting.strip():
            raise ValidationBlockedError("A greeting must be chosen")
        return CompletedWishDraft(
            occasion=self.occasion,
            recipient_name=self.recipient_name.strip(),
            personal_note=self.personal_note,
            festival_type=self.festival_type,
            wedding_type=self.wedding_type,
            template_id=self.template_id,
            greeting_text=self.final_greeting,
            customization=self.customization,
            photos=tuple(p.blob for p in self.photos),
        )
