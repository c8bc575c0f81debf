"""Shared fixtures for learnpath tests."""

import pytest

from learnpath.schemas import CodeExercisePage, Lesson, QuizPage, TheoryPage
from learnpath.storage import KeyValueStorage


PYTHON_TYPES_SAMPLE = 'x = 5\ny = "John"\nprint(type(x))\nprint(type(y))'
PYTHON_TYPES_OUTPUT = "<class 'int'>\n<class 'str'>"


@pytest.fixture
def storage(tmp_path):
    """Fresh key-value storage in a temporary directory."""
    return KeyValueStorage(tmp_path / "storage.db")


@pytest.fixture
def three_page_lesson():
    """Theory, code exercise and quiz pages, in that order."""
    return Lesson(
        id="1",
        course_id="1",
        title="Introduction",
        pages=[
            TheoryPage(id="1-1-1", title="What is Python?", body="Python is a high-level language."),
            CodeExercisePage(
                id="1-1-2",
                title="Basic Python Syntax",
                body="Variable assignment and type checking.",
                initial_code=PYTHON_TYPES_SAMPLE,
                expected_output=PYTHON_TYPES_OUTPUT,
            ),
            QuizPage(
                id="1-1-3",
                title="Test Your Knowledge",
                question="What type of language is Python?",
                options=[
                    "Low-level programming language",
                    "High-level programming language",
                    "Assembly language",
                    "Machine language",
                ],
                correct_index=1,
            ),
        ],
    )


@pytest.fixture
def python_types_sample():
    """Code of the bundled type introspection exercise."""
    return PYTHON_TYPES_SAMPLE


@pytest.fixture
def python_types_output():
    return PYTHON_TYPES_OUTPUT
