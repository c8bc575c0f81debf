"""
Catalog schemas for learnpath.

Defines Pydantic models for course content including:
- Courses and their ordered lesson lists
- Lessons with their page sequences
- Lesson page variants (theory, code exercise, quiz)
- The remote API response envelope
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


class Difficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class PageType(str, Enum):
    THEORY = "theory"
    CODE = "code"
    QUIZ = "quiz"


def coerce_identifier(v: Any) -> Any:
    """Remote identifiers arrive as integers; the client compares them as strings."""
    if isinstance(v, bool):
        raise ValueError("Identifier must be a string or integer")
    if isinstance(v, int):
        return str(v)
    return v


# -----------------------------------------------------------------------------
# Lesson page types
# -----------------------------------------------------------------------------

class LessonPageBase(BaseModel):
    type: str
    id: str
    title: str

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v):
        return coerce_identifier(v)


class TheoryPage(LessonPageBase):
    type: Literal["theory"] = "theory"
    body: str


class CodeExercisePage(LessonPageBase):
    """
    Code exercise with an editable starting buffer.
    expected_output is what the simulated run prints for initial_code.
    """
    type: Literal["code"] = "code"
    body: str
    initial_code: str = ""
    expected_output: str = ""


class QuizPage(LessonPageBase):
    type: Literal["quiz"] = "quiz"
    body: str = ""
    question: str
    options: list[str] = Field(..., min_length=2)
    correct_index: int = Field(..., ge=0)  # 0-based into options

    @model_validator(mode="after")
    def correct_index_in_options(self):
        if self.correct_index >= len(self.options):
            raise ValueError(
                f"correct_index {self.correct_index} out of range for {len(self.options)} options"
            )
        return self


LessonPage = Annotated[
    Union[TheoryPage, CodeExercisePage, QuizPage],
    Field(discriminator="type"),
]


# -----------------------------------------------------------------------------
# Lessons and courses
# -----------------------------------------------------------------------------

class Lesson(BaseModel):
    id: str
    course_id: str  # back-reference only
    title: str
    media_url: Optional[str] = None
    duration: Optional[str] = None
    pages: list[LessonPage] = Field(..., min_length=1)

    @field_validator("id", "course_id", mode="before")
    @classmethod
    def ids_as_strings(cls, v):
        return coerce_identifier(v)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def code_samples(self) -> list[tuple[str, str]]:
        """(initial_code, expected_output) for every code page that has sample code."""
        return [
            (page.initial_code, page.expected_output)
            for page in self.pages
            if isinstance(page, CodeExercisePage) and page.initial_code
        ]


class Course(BaseModel):
    id: str
    title: str
    description: str
    category: str
    difficulty: Difficulty
    lesson_ids: list[str] = []  # order drives lesson numbering
    thumbnail: Optional[str] = None
    duration: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v):
        return coerce_identifier(v)

    @field_validator("lesson_ids", mode="before")
    @classmethod
    def lesson_ids_as_strings(cls, v):
        if isinstance(v, list):
            return [coerce_identifier(item) for item in v]
        return v


class CourseDetail(BaseModel):
    """A course together with its lessons, both from the same source."""
    course: Course
    lessons: list[Lesson]

    def numbered_lessons(self) -> list[tuple[str, Lesson]]:
        """Lessons paired with their display number ("01", "02", ...)."""
        return [
            (str(position).zfill(2), lesson)
            for position, lesson in enumerate(self.lessons, start=1)
        ]


# -----------------------------------------------------------------------------
# Remote envelope
# -----------------------------------------------------------------------------

class ApiResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[str] = None
