"""Domain errors raised by the scoring services.

Each error carries a stable ``code`` (returned to clients as ``error``)
and the HTTP status the API layer maps it to.  Services raise these; only
app/api/error_handlers.py turns them into responses.
"""

from __future__ import annotations

from uuid import UUID


class ScoringError(Exception):
    code = "scoring_error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# --- validation ---


class InvalidAnswer(ScoringError):
    code = "invalid_answer"
    status_code = 422


class UnsupportedAnswerType(ScoringError):
    code = "unsupported_answer_type"

    def __init__(self, answer_type: object) -> None:
        super().__init__(f"Unsupported answer_type: {answer_type}")
        self.answer_type = answer_type


class NotATestIsland(ScoringError):
    code = "not_a_test_island"

    def __init__(self, island_id: UUID) -> None:
        super().__init__("Not a test island")
        self.island_id = island_id


class QuestionCountMismatch(ScoringError):
    code = "question_count_mismatch"

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Expected exactly {expected} test exercises, got {actual}")
        self.expected = expected
        self.actual = actual


class InvalidSectionConfig(ScoringError):
    code = "invalid_section_config"

    def __init__(self, section_id: UUID, reason: str) -> None:
        super().__init__(f"Section test is misconfigured: {reason}")
        self.section_id = section_id
        self.reason = reason


# --- not found ---


class NotFound(ScoringError):
    code = "not_found"
    status_code = 404
    entity = "Entity"

    def __init__(self, entity_id: object) -> None:
        super().__init__(f"{self.entity} not found")
        self.entity_id = entity_id


class ExerciseNotFound(NotFound):
    code = "exercise_not_found"
    entity = "Exercise"


class IslandNotFound(NotFound):
    code = "island_not_found"
    entity = "Island"


class SectionNotFound(NotFound):
    code = "section_not_found"
    entity = "Section"


class CourseNotFound(NotFound):
    code = "course_not_found"
    entity = "Course"


# --- content integrity ---


class AnswerKeyMissing(ScoringError):
    """A gradable exercise has no answer key: an authoring fault upstream."""

    code = "answer_key_missing"
    status_code = 500

    def __init__(self, exercise_id: UUID) -> None:
        super().__init__("Missing answer key for exercise")
        self.exercise_id = exercise_id


# --- storage ---


class StorageError(ScoringError):
    """Transient storage failure.  Safe for the caller to retry."""

    code = "storage_unavailable"
    status_code = 503

    def __init__(self, message: str = "Storage temporarily unavailable") -> None:
        super().__init__(message)
