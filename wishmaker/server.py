import asyncio
import logging
from contextlib import contextmanager
from fastapi import FastAPI, HTTPException, Query, UploadFile, File
from fastapi.middleware.cors import CORSMiddleware

from wishmaker.config import CORS_ORIGINS, GENERATION_TIMEOUT_SECONDS, MAX_PHOTO_BYTES
from wishmaker.errors import ValidationBlockedError, WizardStateError
from wishmaker.models.api import (
    CustomizationUpdate, CustomMessageBody, GreetingRequest, HealthResponse, NoteBody,
    OccasionBody, PresetBody, RecipientBody, TemplateBody, VariationBody,
)
from wishmaker.models.wish import PhotoBlob
from wishmaker.agents.greeting_writer import get_greeting_generator
from wishmaker.flows.navigation import resolve_path
from wishmaker.flows.wish_view import WishView, WishViewStatus
from wishmaker.flows.wizard import WishWizard
from wishmaker.services import catalog
from wishmaker.services.wish_store import fetch_signed_wish
from wishmaker.services.wizard_sessions import wizard_sessions

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Wishmaker API",
    description="Personalized celebration pages: create, customize and share",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Health ────────────────────────────────────────────────────

@app.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse()

# ── Routing ───────────────────────────────────────────────────

@app.get("/api/route")
async def resolve_route(path: str = Query(...)):
    """Tell a client which view an address opens (home, create or wish)."""
    return resolve_path(path).model_dump(mode="json")

# ── Catalog ───────────────────────────────────────────────────

@app.get("/api/occasions")
async def list_occasions():
    return {"occasions": [o.model_dump() for o in catalog.list_occasions()]}


@app.get("/api/festivals")
async def list_festivals():
    return {"festivals": [f.model_dump() for f in catalog.list_festivals()]}


@app.get("/api/wedding-types")
async def list_wedding_types():
    return {"wedding_types": [w.model_dump() for w in catalog.list_wedding_types()]}


@app.get("/api/templates")
async def list_templates(occasion: str = Query(...), festival: str | None = Query(None)):
    """Templates for an occasion, optionally narrowed to one festival."""
    if catalog.occasion_by_id(occasion) is None:
        raise HTTPException(status_code=404, detail="Unknown occasion")
    return {"templates": [t.model_dump() for t in catalog.templates_for(occasion, festival)]}


@app.get("/api/templates/{template_id}")
async def get_template(template_id: str):
    template = catalog.template_by_id(template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return {"template": template.model_dump()}


@app.get("/api/customization/options")
async def customization_options():
    return {
        "color_presets": [p.model_dump() for p in catalog.list_color_presets()],
        "fonts": list(catalog.list_fonts()),
        "photo_layouts": ["grid", "slider"],
    }

# ── Greetings ─────────────────────────────────────────────────

@app.post("/api/greetings")
async def generate_greetings(body: GreetingRequest):
    """Three greeting variations (formal, casual, poetic) without a wizard."""
    generate = get_greeting_generator()
    try:
        variations = await asyncio.wait_for(
            generate(body.recipient_name, body.occasion, body.personal_note,
                     body.festival_type, body.wedding_type),
            timeout=GENERATION_TIMEOUT_SECONDS,
        )
    except Exception as e:
        logger.error(f"Greeting generation failed for {body.occasion}: {e!r}")
        raise HTTPException(status_code=502, detail="Failed to generate greetings")
    return {"variations": [v.model_dump() for v in variations]}

# ── Wizard sessions ───────────────────────────────────────────

@contextmanager
def _wizard_errors():
    try:
        yield
    except WizardStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValidationBlockedError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (ValueError, IndexError) as e:
        raise HTTPException(status_code=400, detail=str(e))


def _get_wizard(session_id: str) -> WishWizard:
    wizard = wizard_sessions.get(session_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="Wizard session not found")
    return wizard


@app.post("/api/wizard")
async def start_wizard():
    session_id, wizard = wizard_sessions.create()
    return {"session_id": session_id, "wizard": wizard.snapshot()}


@app.get("/api/wizard/{session_id}")
async def get_wizard(session_id: str):
    return {"wizard": _get_wizard(session_id).snapshot()}


@app.post("/api/wizard/{session_id}/occasion")
async def select_occasion(session_id: str, body: OccasionBody):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        wizard.select_occasion(body.occasion)
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/recipient")
async def set_recipient(session_id: str, body: RecipientBody):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        wizard.set_recipient_name(body.recipient_name)
        if body.festival_type is not None:
            wizard.select_festival_type(body.festival_type)
        if body.wedding_type is not None:
            wizard.select_wedding_type(body.wedding_type)
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/note")
async def set_note(session_id: str, body: NoteBody):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        wizard.set_personal_note(body.personal_note)
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/photos")
async def upload_photos(session_id: str, files: list[UploadFile] = File(...)):
    """Attach photos. Files beyond the five-photo limit are ignored."""
    wizard = _get_wizard(session_id)
    # Files past the remaining slots are dropped before they are checked.
    blobs = []
    for file in files[:wizard.remaining_photo_slots]:
        mime = file.content_type or "application/octet-stream"
        if not mime.startswith("image/"):
            raise HTTPException(status_code=400, detail=f"{file.filename} is not an image")
        content = await file.read()
        if len(content) > MAX_PHOTO_BYTES:
            raise HTTPException(status_code=400, detail=f"{file.filename} is too large")
        blobs.append(PhotoBlob(filename=file.filename or "photo", content_type=mime, data=content))

    with _wizard_errors():
        added = await wizard.add_photos(blobs)
    return {"added": len(added), "wizard": wizard.snapshot()}


@app.delete("/api/wizard/{session_id}/photos/{index}")
async def remove_photo(session_id: str, index: int):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        wizard.remove_photo(index)
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/continue")
async def continue_wizard(session_id: str):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        wizard.continue_()
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/back")
async def back_wizard(session_id: str):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        wizard.back()
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/template")
async def select_template(session_id: str, body: TemplateBody):
    """Pick a template; greeting variations are requested straight away."""
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        await wizard.select_template(body.template_id)
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/greetings/regenerate")
async def regenerate_greetings(session_id: str):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        await wizard.regenerate_greetings()
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/greetings/select")
async def select_greeting(session_id: str, body: VariationBody):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        wizard.select_variation(body.variation_id)
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/greetings/custom")
async def custom_greeting(session_id: str, body: CustomMessageBody):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        wizard.use_custom_message(body.text)
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/greetings/confirm")
async def confirm_greeting(session_id: str):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        wizard.confirm_greeting()
    return {"wizard": wizard.snapshot()}


@app.patch("/api/wizard/{session_id}/customization")
async def update_customization(session_id: str, body: CustomizationUpdate):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        # exclude_unset=True so only explicitly provided fields change
        wizard.update_customization(**body.model_dump(exclude_unset=True))
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/customization/preset")
async def apply_preset(session_id: str, body: PresetBody):
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        wizard.apply_color_preset(body.name)
    return {"wizard": wizard.snapshot()}


@app.post("/api/wizard/{session_id}/apply")
async def apply_customizations(session_id: str):
    """Save the finished wish and close the wizard session."""
    wizard = _get_wizard(session_id)
    with _wizard_errors():
        slug = await wizard.apply_customizations()
    if slug is None:
        raise HTTPException(status_code=502, detail=wizard.save_error or "Failed to save wish")

    wizard_sessions.discard(session_id)
    return {"slug": slug, "path": f"/wishes/{slug}", "wizard": wizard.snapshot()}

# ── Wish pages ────────────────────────────────────────────────

_VIEW_ERRORS = {
    WishViewStatus.NOT_FOUND: 404,
    WishViewStatus.UNKNOWN_OCCASION: 409,
    WishViewStatus.INVALID_RECORD: 409,
    WishViewStatus.FAILED: 502,
}


async def _load_view(slug: str) -> WishView:
    view = WishView(slug, fetch_wish=fetch_signed_wish)
    status = await view.load()
    if status in _VIEW_ERRORS:
        raise HTTPException(status_code=_VIEW_ERRORS[status], detail=view.error_message)
    return view


@app.get("/api/wishes/{slug}")
async def get_wish(slug: str):
    view = await _load_view(slug)
    return view.to_dict()


@app.get("/api/wishes/{slug}/share")
async def share_wish(slug: str):
    view = await _load_view(slug)
    return view.share_dialog().to_dict()
