"""Pydantic schemas describing raw question-bank records.

The field names follow the JSON question bank (``assignmentnumber``,
``questionnumber``, ``question``, ``image`` and ``options`` with
``optionnumber``/``optiontext``/``iscorrect``). Records are validated here,
at the repository boundary, so the engine only ever sees well-formed
:class:`~study_quiz.core.models.Question` objects.
"""

from __future__ import annotations

from pydantic import (
    BaseModel,
    StrictBool,
    StrictStr,
    ValidationInfo,
    field_validator,
    model_validator,
)

from study_quiz.constants.quiz_constants import (
    MAX_ASSIGNMENT_NUMBER,
    MAX_OPTIONS_PER_QUESTION,
    MIN_ASSIGNMENT_NUMBER,
)
from study_quiz.core.models import Option, Question


def _require_text(value: str, field_name: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"Missing or invalid {field_name} field")
    return cleaned


class RawOption(BaseModel):
    optionnumber: StrictStr
    optiontext: StrictStr
    iscorrect: StrictBool

    @field_validator("optionnumber", "optiontext")
    @classmethod
    def require_text(cls, value: str, info: ValidationInfo) -> str:
        return _require_text(value, info.field_name)


class RawQuestion(BaseModel):
    assignmentnumber: StrictStr
    questionnumber: StrictStr
    question: StrictStr
    image: StrictStr | None = None
    options: list[RawOption]

    @field_validator("assignmentnumber", "questionnumber", "question")
    @classmethod
    def require_text(cls, value: str, info: ValidationInfo) -> str:
        return _require_text(value, info.field_name)

    @field_validator("assignmentnumber")
    @classmethod
    def check_assignment_range(cls, value: str) -> str:
        try:
            number = int(value)
        except ValueError as exc:
            raise ValueError("Assignment number must be an integer") from exc
        if not MIN_ASSIGNMENT_NUMBER <= number <= MAX_ASSIGNMENT_NUMBER:
            raise ValueError(
                f"Assignment number must be between {MIN_ASSIGNMENT_NUMBER} and {MAX_ASSIGNMENT_NUMBER}"
            )
        return value

    @field_validator("options")
    @classmethod
    def check_option_count(cls, value: list[RawOption]) -> list[RawOption]:
        if not value:
            raise ValueError("Question must have at least one option")
        if len(value) > MAX_OPTIONS_PER_QUESTION:
            raise ValueError(f"Question cannot have more than {MAX_OPTIONS_PER_QUESTION} options")
        return value

    @model_validator(mode="after")
    def check_options_consistent(self) -> "RawQuestion":
        seen: set[str] = set()
        for option in self.options:
            if option.optionnumber in seen:
                raise ValueError(f"Duplicate option number: {option.optionnumber}")
            seen.add(option.optionnumber)
        if not any(option.iscorrect for option in self.options):
            raise ValueError("Question must have at least one correct answer")
        return self

    def to_question(self) -> Question:
        return Question(
            assignment_id=self.assignmentnumber,
            question_id=self.questionnumber,
            text=self.question,
            image_ref=self.image,
            options=tuple(
                Option(option_id=option.optionnumber, text=option.optiontext, is_correct=option.iscorrect)
                for option in self.options
            ),
        )

    @classmethod
    def from_question(cls, question: Question) -> "RawQuestion":
        return cls(
            assignmentnumber=question.assignment_id,
            questionnumber=question.question_id,
            question=question.text,
            image=question.image_ref,
            options=[
                RawOption(optionnumber=option.option_id, optiontext=option.text, iscorrect=option.is_correct)
                for option in question.options
            ],
        )
