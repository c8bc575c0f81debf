"""
LessonSession - In-memory state of one lesson being viewed.

Provides:
- Page navigation (next, previous, direct jump from progress dots)
- Code exercise buffer editing and simulated runs
- One-attempt quiz answering with correctness feedback

State is ephemeral. Entering a page resets its interaction state, and the
session never writes completion records itself: the host reads
page_type / answer_correct and decides when to call the CompletionStore.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from learnpath.errors import EmptyCodeError, SessionError
from learnpath.schemas import (
    CodeExercisePage,
    Lesson,
    LessonPage,
    PageType,
    QuizPage,
    TheoryPage,
)

from .fallback import load_fallback_catalog
from .runner import CodeRunner


logger = logging.getLogger(__name__)

CORRECT_FEEDBACK = "Correct! Well done!"
INCORRECT_FEEDBACK = "Incorrect. Try again!"


@dataclass
class CodeState:
    """Editable buffer and last run output of a code page."""
    buffer: str
    output: str = ""


@dataclass
class QuizState:
    """Selection on a quiz page. Once revealed, the answer is locked."""
    selected: Optional[int] = None
    revealed: bool = False


def default_runner(lesson: Lesson) -> CodeRunner:
    """Runner knowing the bundled samples plus the lesson's own."""
    return CodeRunner.from_lessons([*load_fallback_catalog().all_lessons(), lesson])


class LessonSession:
    """
    Page state machine for a single lesson.

    The session is always at a page 0 <= page_index < page_count and starts
    at page 0.
    """

    def __init__(self, lesson: Lesson, runner: Optional[CodeRunner] = None):
        """
        Initialize session at the first page.

        Args:
            lesson: Lesson to view (at least one page)
            runner: Code runner for exercises (default: bundled samples + lesson)
        """
        self.lesson = lesson
        self.runner = runner or default_runner(lesson)
        self._page_index = 0
        self._code: Optional[CodeState] = None
        self._quiz: Optional[QuizState] = None
        self._enter_page(0)

    # -------------------------------------------------------------------------
    # Position
    # -------------------------------------------------------------------------

    @property
    def page_index(self) -> int:
        return self._page_index

    @property
    def page_count(self) -> int:
        return len(self.lesson.pages)

    @property
    def current_page(self) -> LessonPage:
        return self.lesson.pages[self._page_index]

    @property
    def page_type(self) -> PageType:
        return PageType(self.current_page.type)

    @property
    def is_first(self) -> bool:
        return self._page_index == 0

    @property
    def is_last(self) -> bool:
        return self._page_index == self.page_count - 1

    @property
    def position(self) -> tuple[int, int]:
        """Position as (current, total), 1-based."""
        return (self._page_index + 1, self.page_count)

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def _enter_page(self, index: int):
        page = self.lesson.pages[index]
        self._page_index = index
        if isinstance(page, CodeExercisePage):
            self._code = CodeState(buffer=page.initial_code)
            self._quiz = None
        elif isinstance(page, QuizPage):
            self._code = None
            self._quiz = QuizState()
        elif isinstance(page, TheoryPage):
            self._code = None
            self._quiz = None
        else:
            raise TypeError(f"Unknown lesson page type: {type(page).__name__}")

    def next(self) -> bool:
        """Move to the next page. Returns False on the last page."""
        if self.is_last:
            return False
        self._enter_page(self._page_index + 1)
        return True

    def previous(self) -> bool:
        """Move to the previous page. Returns False on the first page."""
        if self.is_first:
            return False
        self._enter_page(self._page_index - 1)
        return True

    def jump_to(self, index: int) -> bool:
        """
        Move to any page (progress dot selection).

        Returns False for an index outside the lesson. Jumping to the page
        already shown keeps its state.
        """
        if not 0 <= index < self.page_count:
            return False
        if index != self._page_index:
            self._enter_page(index)
        return True

    # -------------------------------------------------------------------------
    # Code exercises
    # -------------------------------------------------------------------------

    def _require_code(self) -> CodeState:
        if self._code is None:
            raise SessionError(f"Page {self._page_index} is a {self.page_type.value} page, not code")
        return self._code

    @property
    def code_buffer(self) -> Optional[str]:
        return self._code.buffer if self._code else None

    @property
    def code_output(self) -> Optional[str]:
        return self._code.output if self._code else None

    def edit_code(self, buffer: str):
        """Replace the code buffer of the current code page."""
        self._require_code().buffer = buffer

    def run_code(self, buffer: Optional[str] = None) -> str:
        """
        Simulate running code and keep the output.

        Args:
            buffer: Code to run; replaces the current buffer (default: current buffer)

        Raises:
            SessionError: If the current page is not a code exercise
            EmptyCodeError: If there is no code to run
        """
        state = self._require_code()
        if buffer is not None:
            state.buffer = buffer
        if not state.buffer.strip():
            raise EmptyCodeError("Please enter some code to run")
        state.output = self.runner.run(state.buffer)
        return state.output

    # -------------------------------------------------------------------------
    # Quizzes
    # -------------------------------------------------------------------------

    def _require_quiz(self) -> tuple[QuizPage, QuizState]:
        page = self.current_page
        if not isinstance(page, QuizPage) or self._quiz is None:
            raise SessionError(f"Page {self._page_index} is a {self.page_type.value} page, not quiz")
        return page, self._quiz

    @property
    def selected_answer(self) -> Optional[int]:
        return self._quiz.selected if self._quiz else None

    @property
    def revealed(self) -> bool:
        return bool(self._quiz and self._quiz.revealed)

    def select_answer(self, index: int) -> bool:
        """
        Answer the current quiz and reveal the result.

        Returns False without changing anything if the quiz was already
        answered since the page was entered.

        Raises:
            SessionError: If the current page is not a quiz or index is not an option
        """
        page, state = self._require_quiz()
        if not 0 <= index < len(page.options):
            raise SessionError(f"Option {index} out of range for {len(page.options)} options")
        if state.revealed:
            logger.debug("Quiz %s already answered, ignoring option %d", page.id, index)
            return False
        state.selected = index
        state.revealed = True
        return True

    @property
    def answer_correct(self) -> Optional[bool]:
        """Whether the revealed answer is correct; None before answering or off a quiz page."""
        page = self.current_page
        if not isinstance(page, QuizPage) or not self.revealed:
            return None
        return self._quiz.selected == page.correct_index

    @property
    def quiz_feedback(self) -> Optional[str]:
        correct = self.answer_correct
        if correct is None:
            return None
        return CORRECT_FEEDBACK if correct else INCORRECT_FEEDBACK
