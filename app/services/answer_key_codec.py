"""Answer-key interpretation: is this submitted answer correct?

Pure functions, no I/O.  Grading is all-or-nothing; partial credit is
decided by the caller (there is none).
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

from app.models.answer import AbcdAnswer, Answer, NumericAnswer
from app.services.errors import UnsupportedAnswerType

# Plain decimal notation only: "4", "-4.", ".5", "1e3".  Rejects things
# float() would otherwise accept ("inf", "nan", "1_000").
_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def normalize_choice(raw: object) -> str:
    if raw is None:
        return ""
    return str(raw).strip().upper()


def normalize_numeric(raw: object) -> float | None:
    """Parse a numeric answer, accepting a decimal comma.

    Returns None for anything that is not a finite number.
    """
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        return None
    text = str(raw).strip().replace(",", ".")
    if not _DECIMAL_RE.fullmatch(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def is_correct(answer_type: str, answer_key: Mapping[str, Any], answer: Answer) -> bool:
    if answer_type == "abcd":
        if not isinstance(answer, AbcdAnswer):
            return False
        choice = normalize_choice(answer.choice)
        return bool(choice) and choice == normalize_choice(answer_key.get("correct"))

    if answer_type == "numeric":
        if not isinstance(answer, NumericAnswer):
            return False
        submitted = normalize_numeric(answer.value)
        expected = normalize_numeric(answer_key.get("value"))
        return submitted is not None and expected is not None and submitted == expected

    raise UnsupportedAnswerType(answer_type)


def correct_answer(answer_type: str | None, answer_key: Mapping[str, Any] | None) -> Any:
    """The value shown to the learner as the right answer, or None."""
    if not answer_key:
        return None
    if answer_type == "abcd":
        return answer_key.get("correct")
    if answer_type == "numeric":
        return answer_key.get("value")
    return None
