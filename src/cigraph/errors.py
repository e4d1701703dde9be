"""Error taxonomy for project resolution.

Lookups used while building a task graph report "not found" as ``None`` and
contribute nothing to the result. The exceptions below are raised when a
caller explicitly asks for one named entity, when an alias pattern cannot be
compiled, or when a task execution context is missing required pieces.
"""

from __future__ import annotations


class CigraphError(RuntimeError):
    """Base class for every error raised by the resolution core."""


class NotFoundError(CigraphError):
    """A named variant, task, task group or module does not exist."""


class InvalidPatternError(CigraphError):
    """An alias regex failed to compile."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Error compiling regex: {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class InconsistentContextError(CigraphError):
    """A task execution context is missing a required object or field."""


class ProjectLoadError(CigraphError):
    """A project document could not be parsed into the model."""


class ProjectValidationError(CigraphError):
    """A loaded project references things it does not define."""

    def __init__(self, problems: list[str]) -> None:
        summary = "; ".join(problems)
        super().__init__(f"Invalid project ({len(problems)} problem(s)): {summary}")
        self.problems = list(problems)


class BatchError(CigraphError):
    """One or more units of a batch failed."""

    def __init__(self, errors: list[BaseException]) -> None:
        lines = [str(e) for e in errors]
        super().__init__(f"{len(errors)} error(s): " + "; ".join(lines))
        self.errors = list(errors)


class ErrorCollector:
    """Accumulate per-unit errors and raise them together at the end.

    ``None`` is accepted and ignored so call sites can pass through results
    that may or may not carry an error.
    """

    def __init__(self) -> None:
        self._errors: list[BaseException] = []

    def add(self, err: BaseException | None) -> None:
        if err is not None:
            self._errors.append(err)

    def has_errors(self) -> bool:
        return bool(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    @property
    def errors(self) -> list[BaseException]:
        return list(self._errors)

    def resolve(self) -> None:
        """Raise :class:`BatchError` if anything was collected."""
        if self._errors:
            raise BatchError(self._errors)
