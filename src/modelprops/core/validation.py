"""Validation engine for properties.

A property lists named checks in ``validation_methods()`` and maps those
names to bound methods in ``validation_handlers()``. The validator runs
every check in order, never stops at the first failure, and collects
one ``ValidationIssue`` per failed check.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import asdict, dataclass
from typing import Any, Protocol

from modelprops.shared.logging import log_validation_error

logger = logging.getLogger(__name__)

ValidationHandler = Callable[[], bool]


class Validatable(Protocol):
    """What the validator needs from a property."""

    ident: str | None
    logger: logging.Logger

    def validation_methods(self) -> Sequence[str]: ...

    def validation_handlers(self) -> Mapping[str, ValidationHandler]: ...

    def val(self) -> Any: ...


@dataclass(frozen=True)
class ValidationIssue:
    """One failed validation check.

    Attributes:
        message: Human-readable failure message
        code: Name of the failing check (``required``, ``min``...)
        ident: Ident of the property that failed
        level: Severity, always ``"error"`` for failed checks
    """

    message: str
    code: str
    ident: str | None = None
    level: str = "error"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class PropertyValidator:
    """Run a property's named checks and collect the failures."""

    def __init__(self, model: Validatable) -> None:
        self.model = model
        self._issues: list[ValidationIssue] = []

    def validate(self) -> bool:
        """Run every named check.

        Checks without a handler are skipped. All checks run even after
        a failure.

        Returns:
            True when every check passed.
        """
        self._issues = []
        handlers = self.model.validation_handlers()
        ret = True
        for name in self.model.validation_methods():
            handler = handlers.get(name)
            if handler is None:
                logger.debug("No handler for validation method %s, skipped", name)
                continue
            ret = handler() and ret
        return ret

    def error(self, message: str, code: str) -> ValidationIssue:
        """Record a failed check."""
        issue = ValidationIssue(message=message, code=code, ident=self.model.ident)
        self._issues.append(issue)
        log_validation_error(
            self.model.logger,
            self.model.ident or "",
            self.model.val(),
            message,
            context={"check": code},
        )
        return issue

    def errors(self) -> list[ValidationIssue]:
        return list(self._issues)

    def error_codes(self) -> list[str]:
        return [issue.code for issue in self._issues]

    def is_valid(self) -> bool:
        return not self._issues

    def clear(self) -> None:
        self._issues = []
