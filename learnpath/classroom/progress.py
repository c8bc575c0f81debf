"""
CompletionStore - Durable lesson and test-series completion records.

Records live in two namespaced blobs of the on-device KeyValueStorage:
- lesson_completions: "<courseId>-<lessonId>" -> {completed, score, completedAt}
- test_completions:   "<testId>" -> {score, completedAt}

Every write is a full read-modify-write of its blob. Writes are not locked:
only the single active screen writes, so overlapping writes are resolved
last-write-wins at whole-blob granularity.

Reads never fail the caller. A missing, unreadable or malformed blob is an
empty store, and malformed entries are skipped. Writes refuse to proceed
when the blob cannot be read, so a failed read never erases records.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from pydantic import ValidationError

from learnpath.errors import MalformedKeyError, StorageError
from learnpath.schemas import (
    CompletionKey,
    CompletionRecord,
    CompletionStats,
    CourseProgress,
    SeriesCompletion,
)
from learnpath.storage import KeyValueStorage


logger = logging.getLogger(__name__)

LESSON_COMPLETIONS_KEY = "lesson_completions"
TEST_COMPLETIONS_KEY = "test_completions"


async def load_blob(
    storage: KeyValueStorage, namespace: str, fail_open: bool = True
) -> dict[str, dict]:
    """
    Read a namespace blob as a dict, treating unparsable data as empty.

    Args:
        storage: Backing key-value storage
        namespace: Storage key of the blob
        fail_open: Treat a failed read as empty too. Writers pass False so a
            transient read failure never overwrites the stored records.
    """
    try:
        raw = await storage.get_item(namespace)
    except StorageError as e:
        if not fail_open:
            raise
        logger.warning("Could not read %s, treating as empty: %s", namespace, e)
        return {}
    if raw is None:
        return {}

    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning("Discarding unparsable %s blob: %s", namespace, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Discarding %s blob: expected an object, got %s",
                       namespace, type(data).__name__)
        return {}
    return data


async def save_blob(storage: KeyValueStorage, namespace: str, data: dict[str, dict]):
    await storage.set_item(namespace, json.dumps(data))


class CompletionStore:
    """
    Lesson completion records keyed by (course_id, lesson_id).

    Read by every screen that shows progress; written when the host decides
    a lesson or quiz is complete.
    """

    def __init__(self, storage: KeyValueStorage, namespace: str = LESSON_COMPLETIONS_KEY):
        """
        Initialize completion store.

        Args:
            storage: Backing key-value storage
            namespace: Storage key of the completion blob
        """
        self.storage = storage
        self.namespace = namespace

    async def _load_records(self) -> dict[CompletionKey, CompletionRecord]:
        """Decode the blob, skipping malformed keys and entries."""
        records = {}
        for raw_key, raw_value in (await load_blob(self.storage, self.namespace)).items():
            try:
                key = CompletionKey.decode(raw_key)
            except MalformedKeyError:
                logger.debug("Skipping malformed completion key %r", raw_key)
                continue
            try:
                records[key] = CompletionRecord.model_validate(raw_value)
            except ValidationError as e:
                logger.warning("Skipping invalid completion record %r: %s", raw_key, e)
        return records

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def record_completion(
        self,
        course_id: str,
        lesson_id: str,
        completed: bool = True,
        score: Optional[float] = None,
    ):
        """
        Upsert the completion record for a lesson.

        The new value replaces the old one entirely. Recording the same
        completed/score pair again leaves the stored record untouched.

        Raises:
            MalformedKeyError: If either identifier cannot form a key
            StorageError: If the stored records cannot be read or written
        """
        key = CompletionKey(course_id, lesson_id)
        record = CompletionRecord(
            completed=completed,
            score=score,
            completed_at=datetime.now(timezone.utc),
        )

        data = await load_blob(self.storage, self.namespace, fail_open=False)
        existing = data.get(key.encode())
        if isinstance(existing, dict):
            try:
                previous = CompletionRecord.model_validate(existing)
            except ValidationError:
                previous = None
            if previous and (previous.completed, previous.score) == (completed, score):
                return

        data[key.encode()] = record.model_dump(mode="json", by_alias=True)
        await save_blob(self.storage, self.namespace, data)
        logger.debug("Recorded %s completed=%s score=%s", key.encode(), completed, score)

    async def clear_all(self):
        """Remove every lesson completion record. Irreversible."""
        await self.storage.remove_item(self.namespace)
        logger.info("Cleared all records in %s", self.namespace)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_record(self, course_id: str, lesson_id: str) -> Optional[CompletionRecord]:
        """Get the record for one lesson, or None."""
        records = await self._load_records()
        return records.get(CompletionKey(course_id, lesson_id))

    async def get_completions(self, course_id: Optional[str] = None) -> set[str]:
        """
        Get IDs of completed lessons.

        Args:
            course_id: Only include lessons of this course (default: all courses)
        """
        return {
            key.lesson_id
            for key, record in (await self._load_records()).items()
            if record.completed and (course_id is None or key.course_id == course_id)
        }

    async def is_completed(self, course_id: str, lesson_id: str) -> bool:
        record = await self.get_record(course_id, lesson_id)
        return bool(record and record.completed)

    async def get_course_progress(self, course_id: str, lesson_ids: Iterable[str]) -> CourseProgress:
        """
        Get completion counts for a course.

        Args:
            course_id: Course to summarize
            lesson_ids: The course's lessons; completions for other IDs are ignored
        """
        lesson_ids = list(lesson_ids)
        completed = await self.get_completions(course_id)
        return CourseProgress(
            total_lessons=len(lesson_ids),
            completed_lessons=sum(1 for lesson_id in lesson_ids if lesson_id in completed),
        )

    async def aggregate(self) -> CompletionStats:
        """Count records and completed records across all courses."""
        records = await self._load_records()
        return CompletionStats(
            total_records=len(records),
            completed_count=sum(1 for record in records.values() if record.completed),
        )


class SeriesCompletionStore:
    """Test-series completions, keyed directly by test ID."""

    def __init__(self, storage: KeyValueStorage, namespace: str = TEST_COMPLETIONS_KEY):
        self.storage = storage
        self.namespace = namespace

    async def mark_completed(self, test_id: str, score: Optional[float] = None):
        """
        Record a test series as completed, replacing any earlier result.

        Raises:
            StorageError: If the stored results cannot be read or written
        """
        if not test_id:
            raise ValueError("test_id must be non-empty")
        payload = SeriesCompletion(score=score, completed_at=datetime.now(timezone.utc))
        data = await load_blob(self.storage, self.namespace, fail_open=False)
        data[test_id] = payload.model_dump(mode="json", by_alias=True)
        await save_blob(self.storage, self.namespace, data)

    async def get_completed_ids(self) -> set[str]:
        """Get IDs of every completed test series."""
        return set(await load_blob(self.storage, self.namespace))

    async def get_result(self, test_id: str) -> Optional[SeriesCompletion]:
        raw = (await load_blob(self.storage, self.namespace)).get(test_id)
        if raw is None:
            return None
        try:
            return SeriesCompletion.model_validate(raw)
        except ValidationError as e:
            logger.warning("Ignoring invalid result for test %s: %s", test_id, e)
            return None

    async def clear_all(self):
        await self.storage.remove_item(self.namespace)
