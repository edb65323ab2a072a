from . import base
from . import constraint
from . import conversion
from .base import CellContext, ColumnProcessor, Operation, PassThrough, Strictness, ValidationOperation, ValidationViolation

__all__ = [
    "base",
    "constraint",
    "conversion",
    "CellContext",
    "ColumnProcessor",
    "Operation",
    "PassThrough",
    "Strictness",
    "ValidationOperation",
    "ValidationViolation",
]
