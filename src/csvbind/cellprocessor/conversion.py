from __future__ import annotations

from typing import Any, Optional, Tuple

from csvbind.builder.types import ConstraintDescriptor
from csvbind.cellprocessor.base import CellContext, Operation


class ConversionOperation(Operation):
    """Transforms string values, then always calls next."""

    def __init__(self, descriptor: ConstraintDescriptor, next: Optional[Operation] = None):
        super().__init__(next)
        self.descriptor = descriptor
        self.kind = descriptor.kind

    def convert(self, value: str) -> str:
        raise NotImplementedError

    def execute(self, value: Any, ctx: CellContext) -> Any:
        if isinstance(value, str):
            value = self.convert(value)
        return self.call_next(value, ctx)

    def params(self) -> Tuple[Any, ...]:
        return (self.descriptor.signature(),)


class Trim(ConversionOperation):
    def convert(self, value: str) -> str:
        return value.strip()


class Upper(ConversionOperation):
    def convert(self, value: str) -> str:
        return value.upper()


class Lower(ConversionOperation):
    def convert(self, value: str) -> str:
        return value.lower()
