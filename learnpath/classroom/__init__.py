"""
learnpath Classroom - Runtime components for delivering lessons.

This module provides:
- CatalogGateway: Resolve courses and lessons, remote first with offline fallback
- FallbackCatalog: The bundled offline catalog
- CompletionStore / SeriesCompletionStore: Durable completion records
- LessonSession: Page navigation, code runs and quiz answering
- ScreenScope: Cancel a screen's pending reads when it goes away
"""

from .fallback import (
    FallbackCatalog,
    FALLBACK_CATALOG_PATH,
    load_fallback_catalog,
    read_fallback_catalog,
)

from .gateway import (
    CatalogGateway,
    TokenProvider,
)

from .progress import (
    CompletionStore,
    SeriesCompletionStore,
    LESSON_COMPLETIONS_KEY,
    TEST_COMPLETIONS_KEY,
)

from .runner import (
    CodeRunner,
    GENERIC_SUCCESS,
)

from .session import (
    LessonSession,
    CORRECT_FEEDBACK,
    INCORRECT_FEEDBACK,
)

from .scope import ScreenScope

__all__ = [
    # Fallback
    "FallbackCatalog",
    "FALLBACK_CATALOG_PATH",
    "load_fallback_catalog",
    "read_fallback_catalog",
    # Gateway
    "CatalogGateway",
    "TokenProvider",
    # Progress
    "CompletionStore",
    "SeriesCompletionStore",
    "LESSON_COMPLETIONS_KEY",
    "TEST_COMPLETIONS_KEY",
    # Session
    "CodeRunner",
    "GENERIC_SUCCESS",
    "LessonSession",
    "CORRECT_FEEDBACK",
    "INCORRECT_FEEDBACK",
    # Scope
    "ScreenScope",
]
