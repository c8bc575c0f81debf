"""
CatalogGateway - Resolve courses and lessons, remote first.

Every lookup tries the course API once. On any failure (transport error,
non-200 status, success=false, missing or malformed payload) the lookup is
answered entirely from the bundled fallback catalog; remote and local data
are never merged. An identifier absent from the fallback raises
NotFoundError.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from learnpath.config import (
    COURSE_DETAIL,
    COURSE_LESSONS,
    COURSES_LIST,
    Settings,
    get_settings,
)
from learnpath.errors import NetworkError, NotFoundError
from learnpath.schemas import ApiResponse, Course, CourseDetail, Lesson

from .fallback import FallbackCatalog, load_fallback_catalog


logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[Optional[str]]]

T = TypeVar("T")


def parse_remote_lesson(payload: dict) -> Lesson:
    """
    Convert an API lesson into a Lesson.

    Lessons without explicit pages get a single page built from lessonType:
    Code becomes an empty code exercise, anything else a theory page.
    """
    if not isinstance(payload, dict):
        raise NetworkError(f"Expected a lesson object, got {type(payload).__name__}")
    content = payload.get("content") or ""
    pages = payload.get("pages")
    if not pages:
        lesson_type = str(payload.get("lessonType", "Theory")).lower()
        pages = [{
            "type": "code" if lesson_type == "code" else "theory",
            "id": f"{payload.get('courseId')}-{payload.get('id')}-1",
            "title": payload.get("title", ""),
            "body": content,
        }]

    return Lesson.model_validate({
        "id": payload.get("id"),
        "course_id": payload.get("courseId", payload.get("course_id")),
        "title": payload.get("title"),
        "media_url": payload.get("videoUrl"),
        "duration": payload.get("duration"),
        "pages": pages,
    })


def parse_remote_lessons(payload: Any) -> list[Lesson]:
    """Lessons from an API listing, ordered by orderNumber when present."""
    if not isinstance(payload, list):
        raise NetworkError(f"Expected a list of lessons, got {type(payload).__name__}")
    lessons = [parse_remote_lesson(item) for item in payload]
    order = [
        item["orderNumber"] if isinstance(item.get("orderNumber"), int) else position
        for position, item in enumerate(payload)
    ]
    return [lesson for _, lesson in sorted(zip(order, lessons), key=lambda pair: pair[0])]


def parse_remote_course(payload: Any, lessons: Optional[list[Lesson]] = None) -> Course:
    if not isinstance(payload, dict):
        raise NetworkError(f"Expected a course object, got {type(payload).__name__}")
    lesson_ids = payload.get("lessonIds")
    if lesson_ids is None:
        lesson_ids = [lesson.id for lesson in lessons] if lessons is not None else []
    return Course.model_validate({
        "id": payload.get("id"),
        "title": payload.get("title"),
        "description": payload.get("description", ""),
        "category": payload.get("category", ""),
        "difficulty": payload.get("difficulty"),
        "lesson_ids": lesson_ids,
        "thumbnail": payload.get("thumbnail"),
        "duration": payload.get("duration"),
    })


class CatalogGateway:
    """
    Remote-first course catalog with offline fallback.

    No caching and no retries: each call makes at most one remote attempt
    and at most one fallback lookup.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fallback: Optional[FallbackCatalog] = None,
        token_provider: Optional[TokenProvider] = None,
    ):
        """
        Initialize gateway.

        Args:
            settings: API location and timeout (default: get_settings())
            fallback: Offline catalog (default: the bundled catalog)
            token_provider: Async callable returning a bearer token or None
        """
        self.settings = settings or get_settings()
        self.fallback = fallback or load_fallback_catalog()
        self.token_provider = token_provider

    # -------------------------------------------------------------------------
    # Remote access
    # -------------------------------------------------------------------------

    async def _get_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token_provider:
            token = await self.token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _get(self, path: str) -> Any:
        """
        GET an API path and unwrap the response envelope.

        Raises:
            NetworkError: On transport failure, non-200 status, success=false,
                unparsable body or empty payload
        """
        url = f"{self.settings.api_base_url}{path}"
        headers = await self._get_headers()

        try:
            async with httpx.AsyncClient(timeout=self.settings.request_timeout) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {path} failed: {e}") from e

        try:
            envelope = ApiResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise NetworkError(f"Malformed response from {path}: {e}") from e

        if response.status_code != 200 or not envelope.success:
            reason = envelope.message or envelope.error or f"HTTP {response.status_code}"
            raise NetworkError(f"Request to {path} unsuccessful: {reason}")
        if envelope.data is None:
            raise NetworkError(f"Response from {path} carried no data")
        return envelope.data

    async def _remote_lessons(self, course_id: str) -> list[Lesson]:
        payload = await self._get(COURSE_LESSONS.format(course_id=quote(course_id, safe="")))
        return parse_remote_lessons(payload)

    async def _remote_course_detail(self, course_id: str) -> CourseDetail:
        """
        Fetch a course and its lessons concurrently.

        The first failure cancels the other request, which is awaited before
        the error propagates so nothing keeps running after a fallback.
        """
        course_task = asyncio.ensure_future(
            self._get(COURSE_DETAIL.format(course_id=quote(course_id, safe="")))
        )
        lessons_task = asyncio.ensure_future(self._remote_lessons(course_id))
        tasks = (course_task, lessons_task)
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            for task in tasks:
                if task.done() and task.exception() is not None:
                    raise task.exception()
            lessons = lessons_task.result()
            course = parse_remote_course(course_task.result(), lessons)
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
        return CourseDetail(course=course, lessons=lessons)

    async def _with_fallback(
        self,
        what: str,
        remote: Callable[[], Awaitable[T]],
        local: Callable[[], T],
    ) -> T:
        try:
            return await remote()
        except (NetworkError, ValidationError) as e:
            logger.warning("Remote %s unavailable, using fallback catalog v%s: %s",
                           what, self.fallback.version, e)
        try:
            return local()
        except NotFoundError:
            logger.info("%s not in fallback catalog either", what)
            raise

    # -------------------------------------------------------------------------
    # Public lookups
    # -------------------------------------------------------------------------

    async def fetch_course(self, course_id: str) -> Course:
        """Get a course by ID. Raises NotFoundError if neither source has it."""
        async def remote() -> Course:
            return (await self._remote_course_detail(course_id)).course

        return await self._with_fallback(
            f"course {course_id}", remote, lambda: self.fallback.get_course(course_id)
        )

    async def fetch_lessons(self, course_id: str) -> list[Lesson]:
        """Get a course's lessons in order. Raises NotFoundError if neither source has it."""
        async def remote() -> list[Lesson]:
            return await self._remote_lessons(course_id)

        return await self._with_fallback(
            f"lessons for course {course_id}", remote, lambda: self.fallback.get_lessons(course_id)
        )

    async def fetch_course_detail(self, course_id: str) -> CourseDetail:
        """
        Get a course and its lessons from one source.

        If either remote request fails, both come from the fallback.
        """
        def local() -> CourseDetail:
            return CourseDetail(
                course=self.fallback.get_course(course_id),
                lessons=self.fallback.get_lessons(course_id),
            )

        return await self._with_fallback(
            f"course detail {course_id}", lambda: self._remote_course_detail(course_id), local
        )

    async def fetch_lesson(self, course_id: str, lesson_id: str) -> Lesson:
        """Get one lesson with its pages, for opening a lesson session."""
        async def remote() -> Lesson:
            for lesson in await self._remote_lessons(course_id):
                if lesson.id == lesson_id:
                    return lesson
            raise NetworkError(f"Lesson {lesson_id} missing from remote course {course_id}")

        return await self._with_fallback(
            f"lesson {course_id}/{lesson_id}",
            remote,
            lambda: self.fallback.get_lesson(course_id, lesson_id),
        )

    async def list_courses(self) -> list[Course]:
        """Get every published course."""
        async def remote() -> list[Course]:
            payload = await self._get(COURSES_LIST)
            if not isinstance(payload, list):
                raise NetworkError(f"Expected a list of courses, got {type(payload).__name__}")
            courses = [parse_remote_course(item) for item in payload]
            return [
                course for course, item in zip(courses, payload)
                if item.get("published", True)
            ]

        return await self._with_fallback("course list", remote, self.fallback.list_courses)
