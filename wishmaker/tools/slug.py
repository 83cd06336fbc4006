import random
import re
import string

_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase  # base-36
_SUFFIX_LEN = 4


def _random_suffix(n: int = _SUFFIX_LEN) -> str:
    return "".join(random.choices(_SUFFIX_ALPHABET, k=n))


def generate_slug(occasion: str, name: str) -> str:
    """Readable wish address: ``{clean-name}-{occasion}-{4 base-36 chars}``.

    The random suffix makes collisions unlikely, not impossible; callers that
    store wishes must check the slug is free before committing. An empty name
    yields the degenerate ``-{occasion}-xxxx``.
    """
    clean = re.sub(r"[^a-z0-9\s-]", "", name.lower())
    clean = re.sub(r"\s+", "-", clean.strip())
    clean = clean.strip("- ")
    return f"{clean}-{occasion}-{_random_suffix()}"
