from dataclasses import dataclass, field
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, StrictInt, StrictStr, ValidationError

# pydantic error type -> failure code
_FAILURE_CODES = {
    "missing": "missing_field",
    "string_too_short": "missing_field",
    "greater_than_equal": "invalid_range",
    "int_type": "invalid_range",
    "literal_error": "invalid_choice",
}


class ScoreSubmission(BaseModel):
    game_id: StrictStr = Field(min_length=1)
    stage_id: StrictStr = Field(min_length=1)
    score: StrictInt = Field(ge=0)
    game_time: StrictInt = Field(ge=1)
    items_collected: StrictInt = Field(default=0, ge=0)
    difficulty: Literal["easy", "normal", "hard"] = "normal"


@dataclass(frozen=True)
class FieldFailure:
    field: str
    code: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "code": self.code, "message": self.message}


@dataclass
class SubmissionResult:
    submission: Optional[ScoreSubmission] = None
    failures: List[FieldFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.submission is not None and not self.failures


@dataclass(frozen=True)
class RankingQuery:
    game_id: str
    stage_id: Optional[str]
    limit: int
    cursor: Optional[int]


@dataclass
class QueryResult:
    query: Optional[RankingQuery] = None
    failures: List[FieldFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.query is not None and not self.failures


def validate_submission(payload) -> SubmissionResult:
    if not isinstance(payload, dict):
        return SubmissionResult(failures=[
            FieldFailure("body", "invalid_type", "request body must be a JSON object")
        ])

    try:
        submission = ScoreSubmission.model_validate(payload)
    except ValidationError as exc:
        failures = []
        for error in exc.errors():
            name = ".".join(str(part) for part in error["loc"]) or "body"
            code = _FAILURE_CODES.get(error["type"], "invalid_type")
            failures.append(FieldFailure(name, code, error["msg"]))
        return SubmissionResult(failures=failures)

    return SubmissionResult(submission=submission)


def _parse_positive(name, raw, failures):
    try:
        value = int(raw.strip())
    except ValueError:
        failures.append(FieldFailure(name, "invalid_type", f"{name} must be an integer"))
        return None
    if value < 1:
        failures.append(FieldFailure(name, "invalid_range", f"{name} must be at least 1"))
        return None
    return value


def validate_ranking_query(
    game_id: Optional[str],
    stage_id: Optional[str] = None,
    limit: Optional[str] = None,
    cursor: Optional[str] = None,
    *,
    default_limit: int,
    max_limit: int,
) -> QueryResult:
    """Normalize ranking query parameters.

    A limit above `max_limit` is clamped, not rejected. A blank stage_id
    means the whole game. Cursors must be positive integers.
    """
    failures: List[FieldFailure] = []

    game_id = (game_id or "").strip()
    if not game_id:
        failures.append(FieldFailure("game_id", "missing_field", "game_id is required"))

    stage_id = (stage_id or "").strip() or None

    page_size = default_limit
    if limit is not None and limit.strip():
        parsed = _parse_positive("limit", limit, failures)
        if parsed is not None:
            page_size = min(parsed, max_limit)

    cursor_id = None
    if cursor is not None and cursor.strip():
        cursor_id = _parse_positive("cursor", cursor, failures)

    if failures:
        return QueryResult(failures=failures)
    return QueryResult(query=RankingQuery(game_id, stage_id, page_size, cursor_id))

