"""
CodeRunner - Deterministic output simulation for code exercises.

Nothing is executed. A run resolves in a fixed order:
1. Exact match against known sample code -> that sample's expected output
2. Heuristic pattern match -> canned output
3. Generic success message
"""

from typing import Iterable, Mapping

from learnpath.schemas import Lesson


GENERIC_SUCCESS = "Code executed successfully!"

# (substring, output) pairs, checked in order
HEURISTICS: tuple[tuple[str, str], ...] = (
    ("print(type(", "<class 'int'>\n<class 'str'>"),
    ('print(f"Name:', "Name: Alice\nAge: 30"),
)


def normalize_code(code: str) -> str:
    """Canonical form for sample matching: LF line endings, no trailing whitespace."""
    lines = code.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return "\n".join(line.rstrip() for line in lines).strip("\n")


class CodeRunner:
    """Lookup table from sample code to its expected output."""

    def __init__(self, samples: Mapping[str, str]):
        self._samples = {normalize_code(code): output for code, output in samples.items()}

    @classmethod
    def from_lessons(cls, lessons: Iterable[Lesson]) -> "CodeRunner":
        """Build from every code page of the given lessons. Later lessons win on duplicates."""
        samples = {}
        for lesson in lessons:
            for code, output in lesson.code_samples():
                samples[code] = output
        return cls(samples)

    @property
    def sample_count(self) -> int:
        return len(self._samples)

    def run(self, code: str) -> str:
        """Simulated output for code."""
        output = self._samples.get(normalize_code(code))
        if output is not None:
            return output

        for pattern, canned in HEURISTICS:
            if pattern in code:
                return canned

        return GENERIC_SUCCESS
