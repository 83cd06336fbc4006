import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Annotated, Optional, List, Literal, Union
from datetime import datetime

from wishmaker.models.catalog import OccasionId

GreetingStyle = Literal["formal", "casual", "poetic"]
FontFamily = Literal["Inter", "Playfair Display", "Dancing Script", "Poppins"]
PhotoLayout = Literal["grid", "slider"]

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


# ── Occasion detail (tagged union) ────────────────────────────

class BirthdayDetail(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["birthday"] = "birthday"


class AnniversaryDetail(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["anniversary"] = "anniversary"


class WeddingDetail(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["wedding"] = "wedding"
    wedding_type: Optional[str] = None


class FestivalDetail(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["festival"] = "festival"
    festival_type: Optional[str] = None


OccasionDetail = Annotated[
    Union[BirthdayDetail, AnniversaryDetail, WeddingDetail, FestivalDetail],
    Field(discriminator="kind"),
]

_DETAIL_TYPES = {
    "birthday": BirthdayDetail,
    "anniversary": AnniversaryDetail,
    "wedding": WeddingDetail,
    "festival": FestivalDetail,
}


def detail_for(occasion: str) -> Union[BirthdayDetail, AnniversaryDetail, WeddingDetail, FestivalDetail]:
    """Fresh detail for an occasion, with no sub-type chosen."""
    try:
        return _DETAIL_TYPES[occasion]()
    except KeyError:
        raise ValueError(f"Unknown occasion: {occasion!r}") from None


def festival_type_of(detail) -> Optional[str]:
    return detail.festival_type if isinstance(detail, FestivalDetail) else None


def wedding_type_of(detail) -> Optional[str]:
    return detail.wedding_type if isinstance(detail, WeddingDetail) else None


# ── Greeting + customization ──────────────────────────────────

class GreetingVariation(BaseModel):
    id: str
    style: GreetingStyle
    text: str


class Customization(BaseModel):
    """Everything the Customize step can change; validated on every edit."""
    model_config = ConfigDict(validate_assignment=True)

    background_color: str = "#ffffff"
    text_color: str = "#1f2937"
    accent_color: str = "#8b5cf6"
    font_family: FontFamily = "Inter"
    photo_layout: PhotoLayout = "grid"
    custom_greeting: str = ""

    @field_validator("background_color", "text_color", "accent_color")
    @classmethod
    def _check_hex(cls, value: str) -> str:
        if not _HEX_COLOR.match(value):
            raise ValueError(f"Expected a #rrggbb color, got {value!r}")
        return value.lower()


# ── Draft hand-off + persisted wish ───────────────────────────

class PhotoBlob(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    content_type: str
    data: bytes


class CompletedWishDraft(BaseModel):
    """Immutable snapshot of a finished draft, handed to persistence once."""
    model_config = ConfigDict(frozen=True)

    occasion: OccasionId
    recipient_name: str
    personal_note: str = ""
    festival_type: Optional[str] = None
    wedding_type: Optional[str] = None
    template_id: str
    greeting_text: str
    customization: Customization
    photos: tuple[PhotoBlob, ...] = ()


class PersistResult(BaseModel):
    slug: str


class CustomColors(BaseModel):
    background: str
    text: str
    accent: str


class Wish(BaseModel):
    id: str
    occasion: str  # checked against the catalog by readers
    recipient_name: str
    photo_urls: List[str] = []
    generated_slug: str
    created_at: Optional[datetime] = None
    greeting_text: str = ""
    personal_note: str = ""
    template_id: str = ""
    festival_type: Optional[str] = None
    wedding_type: Optional[str] = None
    custom_colors: Optional[CustomColors] = None
    font_family: Optional[str] = None
    photo_layout: Optional[str] = None
