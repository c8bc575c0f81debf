"""
Progress tracking schemas for learnpath.

Defines the completion records persisted on the device including:
- The composite (course, lesson) storage key
- Lesson and test-series completion payloads
- Aggregate statistics read by progress screens
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from learnpath.errors import MalformedKeyError


KEY_SEPARATOR = "-"


@dataclass(frozen=True)
class CompletionKey:
    """
    Composite (course_id, lesson_id) key for a completion record.

    encode()/decode() are the only place the "<courseId>-<lessonId>"
    storage form is produced or parsed.
    """
    course_id: str
    lesson_id: str

    def __post_init__(self):
        for part in (self.course_id, self.lesson_id):
            if not part or KEY_SEPARATOR in part:
                raise MalformedKeyError(
                    f"Key component must be non-empty and must not contain "
                    f"{KEY_SEPARATOR!r}: {part!r}"
                )

    def encode(self) -> str:
        return f"{self.course_id}{KEY_SEPARATOR}{self.lesson_id}"

    @classmethod
    def decode(cls, raw: str) -> "CompletionKey":
        parts = raw.split(KEY_SEPARATOR)
        if len(parts) != 2:
            raise MalformedKeyError(f"Expected <course>-<lesson>, got {raw!r}")
        return cls(course_id=parts[0], lesson_id=parts[1])


class CompletionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    completed: bool
    score: Optional[float] = Field(default=None, ge=0, le=100)  # percent
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")


class SeriesCompletion(BaseModel):
    """Completion payload for one test series (keyed directly by test id)."""
    model_config = ConfigDict(populate_by_name=True)

    score: Optional[float] = Field(default=None, ge=0, le=100)
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")


class CompletionStats(BaseModel):
    total_records: int = 0
    completed_count: int = 0


class CourseProgress(BaseModel):
    total_lessons: int
    completed_lessons: int

    @computed_field
    @property
    def progress_percentage(self) -> int:
        if self.total_lessons <= 0:
            return 0
        return round(self.completed_lessons / self.total_lessons * 100)
