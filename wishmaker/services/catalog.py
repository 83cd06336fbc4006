"""Read-only catalog of occasions, festivals, wedding types and templates.

All tables are built once at import time as tuples of frozen models and
are never mutated afterwards, so any number of callers can read them
without coordination. Order is declaration order and is significant for
display.
"""

from typing import Optional

from wishmaker.models.catalog import (
    ColorPreset, ColorTheme, Festival, Occasion, Template, WeddingType,
)

_PREVIEW_URL = "https://images.pexels.com/photos/1729931/pexels-photo-1729931.jpeg"

# ── Occasions ─────────────────────────────────────────────────

OCCASIONS: tuple[Occasion, ...] = (
    Occasion(
        id="birthday", title="Birthday", emoji="🎂",
        description="Celebrate another year of joy",
        colors=ColorTheme(primary="from-purple-500 to-pink-500", secondary="from-purple-100 to-pink-100",
                          accent="purple-500", text="purple-900"),
    ),
    Occasion(
        id="anniversary", title="Anniversary", emoji="💖",
        description="Celebrate love and togetherness",
        colors=ColorTheme(primary="from-rose-500 to-red-500", secondary="from-rose-100 to-red-100",
                          accent="rose-500", text="rose-900"),
    ),
    Occasion(
        id="wedding", title="Wedding", emoji="💒",
        description="Celebrate the beginning of forever",
        colors=ColorTheme(primary="from-pink-300 to-rose-400", secondary="from-pink-50 to-rose-50",
                          accent="pink-400", text="pink-900"),
    ),
    Occasion(
        id="festival", title="Festival", emoji="🎉",
        description="Celebrate traditions and joy",
        colors=ColorTheme(primary="from-yellow-400 via-orange-500 to-red-500", secondary="from-yellow-100 to-orange-100",
                          accent="orange-500", text="orange-900"),
    ),
)

FESTIVALS: tuple[Festival, ...] = (
    Festival(id="diwali", name="Diwali", emoji="🪔", colors="from-yellow-400 to-orange-500"),
    Festival(id="holi", name="Holi", emoji="🎨", colors="from-pink-400 to-purple-500"),
    Festival(id="christmas", name="Christmas", emoji="🎄", colors="from-green-500 to-red-500"),
    Festival(id="eid", name="Eid", emoji="🌙", colors="from-blue-400 to-green-400"),
    Festival(id="raksha-bandhan", name="Raksha Bandhan", emoji="🎗️", colors="from-orange-400 to-red-400"),
    Festival(id="new-year", name="New Year", emoji="🎊", colors="from-purple-500 to-blue-500"),
    Festival(id="other", name="Other Festival", emoji="🎉", colors="from-indigo-400 to-purple-500"),
)

WEDDING_TYPES: tuple[WeddingType, ...] = (
    WeddingType(id="invitation", name="Wedding Invitation", emoji="💌"),
    WeddingType(id="announcement", name="Wedding Announcement", emoji="📢"),
    WeddingType(id="save-the-date", name="Save the Date", emoji="📅"),
    WeddingType(id="reception", name="Reception Invitation", emoji="🥂"),
    WeddingType(id="engagement", name="Engagement Announcement", emoji="💍"),
)

# ── Templates ─────────────────────────────────────────────────

TEMPLATES: tuple[Template, ...] = (
    Template(
        id="birthday-balloons", name="Balloon Celebration", category="birthday", preview_url=_PREVIEW_URL,
        colors=ColorTheme(primary="from-purple-500 to-pink-500", secondary="from-purple-100 to-pink-100",
                          accent="purple-500", text="purple-900"),
        animations=("bounce", "float"),
    ),
    Template(
        id="birthday-cake", name="Birthday Cake", category="birthday", preview_url=_PREVIEW_URL,
        colors=ColorTheme(primary="from-pink-400 to-rose-500", secondary="from-pink-100 to-rose-100",
                          accent="pink-500", text="pink-900"),
        animations=("sparkle", "glow"),
    ),
    Template(
        id="anniversary-hearts", name="Timeless Hearts", category="anniversary", preview_url=_PREVIEW_URL,
        colors=ColorTheme(primary="from-rose-500 to-red-500", secondary="from-rose-100 to-red-100",
                          accent="rose-500", text="rose-900"),
        animations=("pulse", "float"),
    ),
    Template(
        id="wedding-elegant", name="Elegant Wedding", category="wedding", preview_url=_PREVIEW_URL,
        colors=ColorTheme(primary="from-rose-300 to-pink-400", secondary="from-rose-50 to-pink-50",
                          accent="rose-400", text="rose-900"),
        animations=("fade", "slide"),
    ),
    Template(
        id="wedding-traditional", name="Traditional Indian", category="wedding", preview_url=_PREVIEW_URL,
        colors=ColorTheme(primary="from-red-500 to-orange-500", secondary="from-red-100 to-orange-100",
                          accent="red-500", text="red-900"),
        animations=("mandala", "lotus"),
    ),
    Template(
        id="diwali-diyas", name="Diwali Diyas", category="festival", festival="diwali", preview_url=_PREVIEW_URL,
        colors=ColorTheme(primary="from-yellow-400 to-orange-500", secondary="from-yellow-100 to-orange-100",
                          accent="orange-500", text="orange-900"),
        animations=("flicker", "glow"),
    ),
    Template(
        id="holi-colors", name="Holi Colors", category="festival", festival="holi", preview_url=_PREVIEW_URL,
        colors=ColorTheme(primary="from-pink-400 to-purple-500", secondary="from-pink-100 to-purple-100",
                          accent="purple-500", text="purple-900"),
        animations=("splash", "rainbow"),
    ),
    Template(
        id="festival-confetti", name="Festive Confetti", category="festival", preview_url=_PREVIEW_URL,
        colors=ColorTheme(primary="from-indigo-400 to-purple-500", secondary="from-indigo-100 to-purple-100",
                          accent="indigo-500", text="indigo-900"),
        animations=("confetti", "sparkle"),
    ),
)

# ── Customization options ─────────────────────────────────────

COLOR_PRESETS: tuple[ColorPreset, ...] = (
    ColorPreset(name="Purple Dream", background="#f3e8ff", text="#581c87", accent="#8b5cf6"),
    ColorPreset(name="Rose Gold", background="#fdf2f8", text="#9f1239", accent="#f43f5e"),
    ColorPreset(name="Ocean Blue", background="#eff6ff", text="#1e3a8a", accent="#3b82f6"),
    ColorPreset(name="Sunset", background="#fff7ed", text="#9a3412", accent="#ea580c"),
    ColorPreset(name="Forest", background="#f0fdf4", text="#14532d", accent="#22c55e"),
    ColorPreset(name="Midnight", background="#1f2937", text="#f9fafb", accent="#6366f1"),
)

FONTS: tuple[str, ...] = ("Inter", "Playfair Display", "Dancing Script", "Poppins")


def list_occasions() -> tuple[Occasion, ...]:
    return OCCASIONS


def list_festivals() -> tuple[Festival, ...]:
    return FESTIVALS


def list_wedding_types() -> tuple[WeddingType, ...]:
    return WEDDING_TYPES


def list_color_presets() -> tuple[ColorPreset, ...]:
    return COLOR_PRESETS


def list_fonts() -> tuple[str, ...]:
    return FONTS


def templates_for(occasion: str, festival_subtype: Optional[str] = None) -> tuple[Template, ...]:
    """Templates for an occasion, in declaration order.

    With a festival sub-type, templates tied to a different festival are
    left out; templates with no festival filter are always offered.
    """
    return tuple(
        t for t in TEMPLATES
        if t.category == occasion
        and (festival_subtype is None or t.festival is None or t.festival == festival_subtype)
    )


def occasion_by_id(occasion_id: str) -> Optional[Occasion]:
    return next((o for o in OCCASIONS if o.id == occasion_id), None)


def template_by_id(template_id: str) -> Optional[Template]:
    return next((t for t in TEMPLATES if t.id == template_id), None)


def festival_by_id(festival_id: str) -> Optional[Festival]:
    return next((f for f in FESTIVALS if f.id == festival_id), None)


def wedding_type_by_id(wedding_type_id: str) -> Optional[WeddingType]:
    return next((w for w in WEDDING_TYPES if w.id == wedding_type_id), None)


def color_preset_by_name(name: str) -> Optional[ColorPreset]:
    return next((p for p in COLOR_PRESETS if p.name == name), None)
