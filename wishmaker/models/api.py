from pydantic import BaseModel, Field
from typing import Optional

from wishmaker.models.catalog import OccasionId
from wishmaker.models.wish import FontFamily, PhotoLayout

class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "wishmaker-backend"
    version: str = "1.0.0"

# ── Wizard request bodies ─────────────────────────────────────

class OccasionBody(BaseModel):
    occasion: OccasionId

class RecipientBody(BaseModel):
    """Name plus the optional sub-type picker shown for festivals and weddings."""
    recipient_name: str
    festival_type: Optional[str] = None
    wedding_type: Optional[str] = None

class NoteBody(BaseModel):
    personal_note: str = ""

class TemplateBody(BaseModel):
    template_id: str

class VariationBody(BaseModel):
    variation_id: str

class CustomMessageBody(BaseModel):
    text: str

class CustomizationUpdate(BaseModel):
    """Whitelist of customization fields; only fields that are sent change."""
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    accent_color: Optional[str] = None
    font_family: Optional[FontFamily] = None
    photo_layout: Optional[PhotoLayout] = None
    custom_greeting: Optional[str] = None

class PresetBody(BaseModel):
    name: str

# ── Direct greeting generation ────────────────────────────────

class GreetingRequest(BaseModel):
    recipient_name: str = Field(..., min_length=1)
    occasion: OccasionId
    personal_note: str = ""
    festival_type: Optional[str] = None
    wedding_type: Optional[str] = None
