from pydantic import BaseModel, ConfigDict
from typing import Optional, Literal

OccasionId = Literal["birthday", "anniversary", "wedding", "festival"]
OCCASION_IDS: tuple[str, ...] = ("birthday", "anniversary", "wedding", "festival")


class ColorTheme(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str
    secondary: str
    accent: str
    text: str


class Occasion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: OccasionId
    title: str
    emoji: str
    description: str
    colors: ColorTheme


class Festival(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    emoji: str
    colors: str  # gradient classes used by the festival picker


class WeddingType(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    emoji: str


class Template(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: OccasionId
    festival: Optional[str] = None  # only offered for this festival when set
    preview_url: str
    colors: ColorTheme
    animations: tuple[str, ...] = ()


class ColorPreset(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    background: str
    text: str
    accent: str
