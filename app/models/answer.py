"""Submitted answers as a tagged variant.

The wire payload is ``{"choice": ...}`` for abcd exercises and
``{"value": ...}`` for numeric ones.  ``parse_answer`` picks the variant
from the exercise's answer_type and rejects payloads of the wrong shape,
so the codec never has to guess.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from app.services.errors import InvalidAnswer, UnsupportedAnswerType


@dataclass(frozen=True, slots=True)
class AbcdAnswer:
    choice: str = ""

    def to_json(self) -> dict[str, Any]:
        return {"choice": self.choice}


@dataclass(frozen=True, slots=True)
class NumericAnswer:
    # Kept as submitted: "4,0" and 4 are both valid, the codec normalizes.
    value: str | int | float | None = None

    def to_json(self) -> dict[str, Any]:
        return {"value": self.value}


Answer = AbcdAnswer | NumericAnswer


def parse_answer(answer_type: str, payload: Mapping[str, Any] | None) -> Answer:
    """Build the answer variant for ``answer_type`` from a raw payload.

    A missing payload or a missing field is an empty answer (graded as
    incorrect), not an error.  A field of the wrong JSON type is an error.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise InvalidAnswer("answer must be an object")

    if answer_type == "abcd":
        choice = payload.get("choice")
        if choice is None:
            return AbcdAnswer()
        if not isinstance(choice, str):
            raise InvalidAnswer("answer.choice must be a string")
        return AbcdAnswer(choice=choice)

    if answer_type == "numeric":
        value = payload.get("value")
        if isinstance(value, bool) or not (
            value is None or isinstance(value, (str, int, float))
        ):
            raise InvalidAnswer("answer.value must be a number or a string")
        return NumericAnswer(value=value)

    raise UnsupportedAnswerType(answer_type)
