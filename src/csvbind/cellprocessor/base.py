from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from csvbind.builder.types import BuildCase, ConstraintDescriptor, FieldSpec

logger = logging.getLogger(__name__)


class Strictness(str, Enum):
    ACCUMULATE = "accumulate"   # record the violation, keep running the chain
    FAIL_FAST = "fail_fast"     # stop the chain (and the record) at the first violation

    @classmethod
    def parse(cls, value: Any) -> "Strictness":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", "_"))
        except ValueError:
            raise ValueError(f"Unknown strictness {value!r}; expected one of {[s.value for s in cls]}") from None


@dataclass(frozen=True)
class ValidationViolation:
    """One per-value finding. Collected and returned, never raised."""

    field: str
    label: str
    column_number: int
    kind: str
    value: Any
    message: str
    words: Tuple[str, ...] = ()
    row_number: Optional[int] = None
    line_number: Optional[int] = None


@dataclass
class CellContext:
    """Per-record, per-column state handed down the chain."""

    field: FieldSpec
    case: BuildCase = BuildCase.READ
    row_number: Optional[int] = None
    line_number: Optional[int] = None
    violations: List[ValidationViolation] = field(default_factory=list)

    def variables(self, value: Any, **extra: Any) -> Dict[str, Any]:
        out = {
            "row_number": self.row_number,
            "line_number": self.line_number,
            "column_number": self.field.number,
            "label": self.field.label,
            "validated_value": value,
            **extra,
        }
        # None renders as the missing-variable marker
        return {k: v for k, v in out.items() if v is not None}


class Operation:
    """
    One link of a column chain. Performs its work, then hands the value to
    `next` (the operation built before it).
    """

    kind = "identity"

    def __init__(self, next: Optional["Operation"] = None):
        self.next = next

    def execute(self, value: Any, ctx: CellContext) -> Any:
        raise NotImplementedError

    def call_next(self, value: Any, ctx: CellContext) -> Any:
        if self.next is None:
            return value
        return self.next.execute(value, ctx)

    def params(self) -> Tuple[Any, ...]:
        return ()

    def signature(self) -> Tuple[Any, ...]:
        return (self.kind, self.params())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind})"


class PassThrough(Operation):
    """End of every chain: returns the value unchanged."""

    def execute(self, value: Any, ctx: CellContext) -> Any:
        return value


class ValidationOperation(Operation):
    """
    Base for constraint operations.

    check() returns None when the value is fine, otherwise the extra message
    variables for the violation (e.g. {"words": [...]}).
    """

    skip_empty = True

    def __init__(self, descriptor: ConstraintDescriptor, messages: Any, strictness: Strictness, next: Optional[Operation] = None):
        super().__init__(next)
        self.descriptor = descriptor
        self.kind = descriptor.kind
        self.messages = messages
        self.strictness = strictness

    def check(self, value: Any, ctx: CellContext) -> Optional[Mapping[str, Any]]:
        raise NotImplementedError

    def execute(self, value: Any, ctx: CellContext) -> Any:
        if self.skip_empty and (value is None or value == ""):
            return self.call_next(value, ctx)
        found = self.check(value, ctx)
        if found is None:
            return self.call_next(value, ctx)
        self.report(value, ctx, found)
        if self.strictness is Strictness.FAIL_FAST:
            return value
        return self.call_next(value, ctx)

    def report(self, value: Any, ctx: CellContext, extra: Mapping[str, Any]) -> ValidationViolation:
        variables = ctx.variables(value, **extra)
        message = self.messages.resolve(self.descriptor.message, variables, kind=self.kind)
        violation = ValidationViolation(
            field=ctx.field.name,
            label=ctx.field.label,
            column_number=ctx.field.number,
            kind=self.kind,
            value=value,
            message=message,
            words=tuple(extra.get("words", ())),
            row_number=ctx.row_number,
            line_number=ctx.line_number,
        )
        ctx.violations.append(violation)
        logger.debug("violation %s", message)
        return violation

    def params(self) -> Tuple[Any, ...]:
        return (self.descriptor.signature(), self.strictness.value)


@dataclass(frozen=True)
class ColumnProcessor:
    """Compiled chain for one field and one build case. Read-only after construction."""

    field: FieldSpec
    case: BuildCase
    head: Operation
    descriptors: Tuple[ConstraintDescriptor, ...] = ()

    @property
    def kinds(self) -> Tuple[str, ...]:
        return tuple(d.kind for d in self.descriptors)

    @property
    def is_identity(self) -> bool:
        return isinstance(self.head, PassThrough)

    def operations(self) -> List[Operation]:
        ops: List[Operation] = []
        op: Optional[Operation] = self.head
        while op is not None:
            ops.append(op)
            op = op.next
        return ops

    def signature(self) -> Tuple[Any, ...]:
        return (self.field.name, self.field.number, self.case.value, tuple(op.signature() for op in self.operations()))

    def execute(self, value: Any, ctx: CellContext) -> Any:
        return self.head.execute(value, ctx)
