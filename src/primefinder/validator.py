# -----------------------------------------------------------------------------
#  validator.py
#  Turn user text into a bounded positive integer
# -----------------------------------------------------------------------------

from __future__ import annotations

import re
from typing import Literal

from primefinder.number_theory import BOUND
from primefinder.utility import UserInputError

Reason = Literal["empty", "non_numeric", "negative", "zero", "too_large"]

# Plain digits, or digit groups joined by a single separator kind
_PLAIN_RE = re.compile(r"[0-9]+")
_GROUPED_RE = re.compile(r"[0-9]{1,3}(?:(?P<sep>[, ])[0-9]{3})(?:(?P=sep)[0-9]{3})*")
_UNDERSCORE_RE = re.compile(r"[0-9]+(?:_[0-9]+)+")
_NEGATIVE_RE = re.compile(r"-\s*[0-9][0-9,_ ]*")
_BOUND_DIGITS = len(str(BOUND))
_SHOWN_MAX = 40

_MESSAGES: dict[str, str] = {
    "empty": "Please enter a positive integer.",
    "non_numeric": "'{text}' is not a whole number.",
    "negative": "negative numbers are not supported, please enter a positive integer.",
    "zero": "0 is not a positive integer.",
    "too_large": "{text} is larger than the maximum of {bound}.",
}


class InvalidInputError(UserInputError):
    """Rejected input; `reason` tells why."""

    def __init__(self, reason: Reason, text: str = ""):
        self.reason = reason
        self.text = text
        shown = text if len(text) <= _SHOWN_MAX else text[:_SHOWN_MAX] + "…"
        super().__init__(_MESSAGES[reason].format(text=shown, bound=BOUND))


def _digits(text: str) -> str | None:
    if _PLAIN_RE.fullmatch(text):
        return text
    if _GROUPED_RE.fullmatch(text) or _UNDERSCORE_RE.fullmatch(text):
        return re.sub(r"[, _]", "", text)
    return None


def parse(text: str) -> int:
    """
    Parse a decimal string into an integer in [1, BOUND].

    Surrounding whitespace is ignored and digit groups may be separated by
    commas, underscores or single spaces. Raises InvalidInputError otherwise.
    """
    s = (text or "").strip()
    if not s:
        raise InvalidInputError("empty", s)

    digits = _digits(s)
    if digits is None:
        if _NEGATIVE_RE.fullmatch(s):
            raise InvalidInputError("negative", s)
        raise InvalidInputError("non_numeric", s)

    significant = digits.lstrip("0")
    if not significant:
        raise InvalidInputError("zero", s)
    # int() refuses very long digit strings; anything this long is out of range
    if len(significant) > _BOUND_DIGITS or int(significant) > BOUND:
        raise InvalidInputError("too_large", s)
    return int(significant)


def is_valid_input(text: str) -> bool:
    try:
        parse(text)
    except InvalidInputError:
        return False
    return True
