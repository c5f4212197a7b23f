import re
from typing import Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(text: Optional[str]) -> str:
    """Reduce a label to its lowercase alphanumeric fingerprint.

    "SONY CDP-337ESD" and "sonycdp337esd" both become "sonycdp337esd".
    ``None`` and the empty string yield "".
    """
    if not text:
        return ""
    return _NON_ALNUM.sub("", text.lower())


def contains_either_way(a: str, b: str) -> bool:
    """True when one normalized label contains the other.

    Both arguments must already be normalized.  An empty fingerprint never
    matches, otherwise it would be a substring of everything.
    """
    if not a or not b:
        return False
    return a in b or b in a
