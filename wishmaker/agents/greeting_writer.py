import asyncio
import json
import logging
from typing import Awaitable, Callable, Optional
from google import genai
from google.genai import types
from wishmaker.config import GOOGLE_API_KEY, GEMINI_MODEL, GREETING_BACKEND
from wishmaker.errors import GreetingGenerationError
from wishmaker.models.wish import GreetingVariation

logger = logging.getLogger(__name__)

STYLES = ("formal", "casual", "poetic")

GreetingGenerator = Callable[..., Awaitable[list[GreetingVariation]]]

_client: Optional[genai.Client] = None


def get_client() -> genai.Client:
    global _client
    if _client is None:
        _client = genai.Client(api_key=GOOGLE_API_KEY)
    return _client


# ── Occasion vocabulary ───────────────────────────────────────

_FESTIVAL_EMOJI = {
    "diwali": "🪔✨",
    "holi": "🎨🌈",
    "christmas": "🎄🎅",
    "eid": "🌙⭐",
    "raksha-bandhan": "🎗️👫",
    "new-year": "🎊🥳",
}


def occasion_context(occasion: str, festival_type: Optional[str] = None,
                     wedding_type: Optional[str] = None) -> dict:
    """Emoji pair plus wish/action phrases for an occasion.

    Unknown occasions use the birthday vocabulary.
    """
    contexts = {
        "birthday": {
            "emoji": "🎂🎉",
            "wishes": ["another year of joy", "happiness and success", "wonderful memories"],
            "actions": ["celebrate", "party", "make wishes"],
        },
        "anniversary": {
            "emoji": "💖💕",
            "wishes": ["continued love", "togetherness", "beautiful moments"],
            "actions": ["celebrate your journey", "cherish memories", "look forward"],
        },
        "wedding": {
            "emoji": "💍✨" if wedding_type == "engagement" else "💒🎊",
            "wishes": ["lifetime of happiness", "endless love", "beautiful future"],
            "actions": ["begin forever", "unite hearts", "celebrate love"],
        },
        "festival": {
            "emoji": _FESTIVAL_EMOJI.get(festival_type or "", "🎉✨"),
            "wishes": ["joy and prosperity", "blessings", "celebration"],
            "actions": ["celebrate traditions", "spread joy", "share happiness"],
        },
    }
    return contexts.get(occasion, contexts["birthday"])


def _compose(*paragraphs: str) -> str:
    # An empty note drops out entirely rather than leaving a blank block.
    return "\n\n".join(p for p in paragraphs if p)


def _note_block(note: str) -> str:
    # Any non-empty note is kept exactly as typed.
    return note or ""


def formal_greeting(name: str, context: dict, note: str) -> str:
    return _compose(
        f"{context['emoji']} Dear {name},",
        "On this special occasion, I extend my warmest wishes to you. "
        f"May this celebration bring you {context['wishes'][0]} and fill your life with beautiful moments.",
        _note_block(note),
        "With heartfelt regards and best wishes for your continued happiness and success.",
    )


def casual_greeting(name: str, context: dict, note: str) -> str:
    return _compose(
        f"Hey {name}! {context['emoji']}",
        "Hope you have an absolutely amazing celebration! "
        f"Wishing you all the {context['wishes'][1]} and lots of fun times ahead.",
        _note_block(note),
        f"Can't wait to {context['actions'][0]} with you! 🎉",
    )


def poetic_greeting(name: str, context: dict, note: str) -> str:
    return _compose(
        f"{context['emoji']} For {name} {context['emoji']}",
        "Like stars that shine in darkest night,\n"
        "Your special day brings pure delight.\n"
        f"May {context['wishes'][2]} dance around,\n"
        "And joy in every moment be found.",
        _note_block(note),
        "Here's to you and all the magic this day brings! ✨",
    )


async def generate_greeting_variations(
    recipient_name: str,
    occasion: str,
    personal_note: str,
    festival_type: Optional[str] = None,
    wedding_type: Optional[str] = None,
) -> list[GreetingVariation]:
    """Three greetings for the recipient, one per style: formal, casual, poetic.

    Built from fixed text templates, so the same inputs always give the same
    texts.
    """
    context = occasion_context(occasion, festival_type, wedding_type)
    return [
        GreetingVariation(id="formal", style="formal",
                          text=formal_greeting(recipient_name, context, personal_note)),
        GreetingVariation(id="casual", style="casual",
                          text=casual_greeting(recipient_name, context, personal_note)),
        GreetingVariation(id="poetic", style="poetic",
                          text=poetic_greeting(recipient_name, context, personal_note)),
    ]


# ── Gemini backend ────────────────────────────────────────────

def _build_prompt(recipient_name: str, occasion: str, personal_note: str,
                  festival_type: Optional[str], wedding_type: Optional[str]) -> str:
    context = occasion_context(occasion, festival_type, wedding_type)
    detail_lines = []
    if festival_type:
        detail_lines.append(f"- Festival: {festival_type}")
    if wedding_type:
        detail_lines.append(f"- Wedding message type: {wedding_type}")
    if personal_note:
        detail_lines.append(f'- Personal note to weave in verbatim: "{personal_note}"')
    details = "\n".join(detail_lines)

    return f"""You write short greeting messages for personal celebration web pages.

OCCASION: {occasion}
RECIPIENT: {recipient_name}
{details}
Suggested emoji: {context['emoji']}

Write three different greetings addressed to {recipient_name}:
- "formal": warm but dignified, 3-5 sentences
- "casual": friendly and playful, 2-4 sentences
- "poetic": a short rhyming verse of 4-6 lines

Every greeting must mention {recipient_name} by name. If a personal note is given,
include it unchanged as its own paragraph. Do not leave empty placeholder lines.

Respond with JSON only:
{{"formal": "<text>", "casual": "<text>", "poetic": "<text>"}}"""


def _parse_variations(raw: str) -> list[GreetingVariation]:
    raw = raw.strip()
    if raw.startswith("```"):
        lines = raw.split("\n")
        raw = "\n".join(lines[1:-1])
    result = json.loads(raw)
    if not isinstance(result, dict):
        raise ValueError("Expected a JSON object")

    variations = []
    for style in STYLES:
        text = result.get(style)
        if not isinstance(text, str) or not text.strip():
            raise ValueError(f"Missing {style} greeting")
        variations.append(GreetingVariation(id=style, style=style, text=text.strip()))
    return variations


async def generate_greeting_variations_gemini(
    recipient_name: str,
    occasion: str,
    personal_note: str,
    festival_type: Optional[str] = None,
    wedding_type: Optional[str] = None,
) -> list[GreetingVariation]:
    """Same contract as :func:`generate_greeting_variations`, written by Gemini.

    Raises GreetingGenerationError when the call fails or the reply does not
    hold exactly the three styles.
    """
    prompt = _build_prompt(recipient_name, occasion, personal_note, festival_type, wedding_type)
    try:
        response = await asyncio.to_thread(
            get_client().models.generate_content,
            model=GEMINI_MODEL,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                temperature=0.9,
            ),
        )
        return _parse_variations(response.text or "")
    except Exception as e:
        logger.error(f"Greeting generation error for {occasion}: {e}")
        raise GreetingGenerationError(str(e)) from e


def get_greeting_generator(backend: str = GREETING_BACKEND) -> GreetingGenerator:
    if backend == "gemini":
        return generate_greeting_variations_gemini
    if backend != "static":
        logger.warning("Unknown GREETING_BACKEND %r, using static templates", backend)
    return generate_greeting_variations
