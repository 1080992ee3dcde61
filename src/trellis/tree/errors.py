"""Route tree errors — resolve and apply failures with positional context.

Every failure is raised as a ``RouteTreeError`` subclass. Each recursion
level wraps the failure of its child in a ``ChildFailure`` that records
the child's kind and index plus the rendered parent definition, so a
caller can read the message *or* walk the structure::

    try:
        root.resolve()
    except RouteTreeError as exc:
        exc.trail   # (("router", 0), ("route", 2))
        exc.root    # the MissingHandler raised at the leaf

The combined resolve-then-apply helpers add one ``StageError`` layer
(``ResolveError`` or ``ApplyError``) naming the phase that failed.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar, TypeAlias

from trellis.errors import TrellisError

if TYPE_CHECKING:
    from trellis.tree.definitions import RouteDefinition, RouterDefinition

    AnyDefinition: TypeAlias = RouteDefinition | RouterDefinition


class ErrorKind(StrEnum):
    """Machine-readable failure kind carried by every tree error."""

    ABSENT_PRODUCER = "absent_producer"
    NIL_HANDLER = "nil_handler"
    PRODUCER_ERROR = "producer_error"
    NIL_TARGET = "nil_target"
    CHILD_FAILURE = "child_failure"
    STAGE = "stage"


class RouteTreeError(TrellisError):
    """Base for failures while resolving or applying a route tree.

    Attributes:
        operation: The operation that raised, e.g. ``"Router.resolve"``.
        definition: The (possibly partial) definition being built or
            applied, or ``None`` when nothing could be produced.
        cause: The wrapped error, if any. Also set as ``__cause__``.
    """

    kind: ClassVar[ErrorKind]

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        definition: AnyDefinition | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.definition = definition
        self.cause = cause

    @property
    def context(self) -> str:
        """The rendered definition, or ``""`` when there is none."""
        if self.definition is None:
            return ""
        return str(self.definition)

    @property
    def trail(self) -> tuple[tuple[str, int], ...]:
        """``(child_kind, index)`` steps from this error down to the failing node."""
        steps: list[tuple[str, int]] = []
        err: BaseException | None = self
        while isinstance(err, (ChildFailure, StageError)):
            if isinstance(err, ChildFailure):
                steps.append((err.child, err.index))
            err = err.cause
        return tuple(steps)

    @property
    def root(self) -> BaseException:
        """The innermost error once child and stage wrappers are peeled off."""
        err: BaseException = self
        while isinstance(err, (ChildFailure, StageError)) and err.cause is not None:
            err = err.cause
        return err


class AbsentProducer(RouteTreeError):
    """A route or router producer was required but ``None`` was given."""

    kind = ErrorKind.ABSENT_PRODUCER

    def __init__(self, operation: str, subject: str) -> None:
        super().__init__(f"{operation} nil {subject}", operation=operation)
        self.subject = subject


class ProducerError(RouteTreeError):
    """The producer itself reported (or raised) a failure."""

    kind = ErrorKind.PRODUCER_ERROR

    def __init__(
        self,
        operation: str,
        subject: str,
        definition: AnyDefinition,
        cause: BaseException,
    ) -> None:
        super().__init__(
            f"{operation} {subject} error ({definition}): {cause}",
            operation=operation,
            definition=definition,
            cause=cause,
        )
        self.subject = subject


class MissingHandler(RouteTreeError):
    """A handler slot in the chain is ``None`` or not callable."""

    kind = ErrorKind.NIL_HANDLER

    def __init__(self, operation: str, index: int, definition: AnyDefinition) -> None:
        handler = definition.handlers[index]
        if handler is None:
            problem = f"nil handler at index {index}"
        else:
            problem = f"handler at index {index} is not callable ({type(handler).__name__})"
        super().__init__(
            f"{operation} {problem} ({definition})",
            operation=operation,
            definition=definition,
        )
        self.index = index


class MissingTarget(RouteTreeError):
    """Apply was called without an engine adapter to register onto."""

    kind = ErrorKind.NIL_TARGET

    def __init__(self, operation: str, definition: AnyDefinition) -> None:
        super().__init__(
            f"{operation} nil target ({definition})",
            operation=operation,
            definition=definition,
        )


class ChildFailure(RouteTreeError):
    """A nested route or router failed during resolve or apply.

    Attributes:
        child: ``"route"`` or ``"router"``.
        index: Position of the failing child in its parent's sequence.
        stage: ``"resolve"`` or ``"apply"``.
    """

    kind = ErrorKind.CHILD_FAILURE

    def __init__(
        self,
        operation: str,
        *,
        child: str,
        index: int,
        stage: str,
        definition: AnyDefinition,
        cause: BaseException,
    ) -> None:
        if stage == "apply":
            message = f"{operation} error applying {child} at index {index} ({definition}): {cause}"
        else:
            message = f"{operation} {child} error at index {index} ({definition}): {cause}"
        super().__init__(message, operation=operation, definition=definition, cause=cause)
        self.child = child
        self.index = index
        self.stage = stage


class StageError(RouteTreeError):
    """Labels which phase of a combined resolve-then-apply call failed."""

    kind = ErrorKind.STAGE
    stage: ClassVar[str]

    def __init__(self, operation: str, cause: BaseException) -> None:
        definition = cause.definition if isinstance(cause, RouteTreeError) else None
        super().__init__(
            f"{operation} {self.stage} error: {cause}",
            operation=operation,
            definition=definition,
            cause=cause,
        )


class ResolveError(StageError):
    """The resolve phase of ``Route.apply`` / ``Router.apply`` failed."""

    stage = "resolve"


class ApplyError(StageError):
    """The apply phase of ``Route.apply`` / ``Router.apply`` failed."""

    stage = "apply"
