"""
FallbackCatalog - Bundled offline course catalog.

Loaded once from learnpath/data/fallback_catalog.yaml and treated as
read-only configuration. The gateway substitutes it wholesale when the
remote catalog cannot be used.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, model_validator

from learnpath.errors import NotFoundError
from learnpath.schemas import Course, Lesson


DATA_DIR = Path(__file__).parent.parent / "data"
FALLBACK_CATALOG_PATH = DATA_DIR / "fallback_catalog.yaml"


class FallbackCatalog(BaseModel):
    """Versioned, immutable lookup table of courses and their lessons."""
    model_config = ConfigDict(frozen=True)

    version: int
    courses: tuple[Course, ...]
    lessons: dict[str, tuple[Lesson, ...]]  # course_id -> lessons in order

    @model_validator(mode="after")
    def lessons_match_courses(self):
        for course in self.courses:
            lesson_ids = [lesson.id for lesson in self.lessons.get(course.id, ())]
            if lesson_ids != course.lesson_ids:
                raise ValueError(
                    f"Course {course.id} lists lessons {course.lesson_ids} "
                    f"but the catalog holds {lesson_ids}"
                )
            for lesson in self.lessons.get(course.id, ()):
                if lesson.course_id != course.id:
                    raise ValueError(
                        f"Lesson {lesson.id} is filed under course {course.id} "
                        f"but points at course {lesson.course_id}"
                    )
        return self

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def list_courses(self) -> list[Course]:
        return list(self.courses)

    def get_course(self, course_id: str) -> Course:
        for course in self.courses:
            if course.id == course_id:
                return course
        raise NotFoundError("course", course_id)

    def get_lessons(self, course_id: str) -> list[Lesson]:
        # An unknown course is not found even if it had an (empty) lesson list
        self.get_course(course_id)
        return list(self.lessons.get(course_id, ()))

    def get_lesson(self, course_id: str, lesson_id: str) -> Lesson:
        for lesson in self.get_lessons(course_id):
            if lesson.id == lesson_id:
                return lesson
        raise NotFoundError("lesson", f"{course_id}/{lesson_id}")

    def all_lessons(self) -> list[Lesson]:
        return [lesson for course in self.courses for lesson in self.lessons.get(course.id, ())]


def read_fallback_catalog(path: Optional[Path] = None) -> FallbackCatalog:
    """
    Parse a fallback catalog file.

    Args:
        path: YAML file to read (default: the bundled catalog)

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If the catalog is inconsistent
    """
    file_path = path or FALLBACK_CATALOG_PATH
    if not file_path.exists():
        raise FileNotFoundError(f"Fallback catalog not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return FallbackCatalog.model_validate(raw)


@lru_cache(maxsize=1)
def load_fallback_catalog() -> FallbackCatalog:
    """The bundled catalog, parsed on first use."""
    return read_fallback_catalog()
