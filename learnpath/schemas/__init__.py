"""
learnpath Schemas - Pydantic models for the course delivery client.

This module exports all schema classes for:
- Catalog: courses, lessons, lesson pages, API envelope
- Progress: completion keys and records, aggregate statistics
"""

# Catalog schemas
from .catalog import (
    Difficulty,
    PageType,
    TheoryPage,
    CodeExercisePage,
    QuizPage,
    LessonPage,
    Lesson,
    Course,
    CourseDetail,
    ApiResponse,
)

# Progress schemas
from .progress import (
    CompletionKey,
    CompletionRecord,
    SeriesCompletion,
    CompletionStats,
    CourseProgress,
)

__all__ = [
    # Catalog
    'Difficulty',
    'PageType',
    'TheoryPage',
    'CodeExercisePage',
    'QuizPage',
    'LessonPage',
    'Lesson',
    'Course',
    'CourseDetail',
    'ApiResponse',
    # Progress
    'CompletionKey',
    'CompletionRecord',
    'SeriesCompletion',
    'CompletionStats',
    'CourseProgress',
]
