from __future__ import annotations
from typing import Optional, List, Any
from pydantic import BaseModel, Field


class ViolationRecord(BaseModel):
    # Schema for one reported validation violation
    schema_version: str = Field(default='0.1.0')
    field: str
    label: str
    column_number: int
    kind: str
    value: Optional[str] = None
    message: str
    words: List[str] = Field(default_factory=list)
    row_number: Optional[int] = None
    line_number: Optional[int] = None

    @classmethod
    def from_violation(cls, v: Any) -> "ViolationRecord":
        return cls(
            field=v.field,
            label=v.label,
            column_number=v.column_number,
            kind=v.kind,
            value=None if v.value is None else str(v.value),
            message=v.message,
            words=list(v.words),
            row_number=v.row_number,
            line_number=v.line_number,
        )


class RecordReport(BaseModel):
    # Schema for the per-record line of a validation report (JSONL)
    schema_version: str = Field(default='0.1.0')
    bean: str
    row_number: Optional[int] = None
    line_number: Optional[int] = None
    ok: bool
    error: Optional[str] = None
    violations: List[ViolationRecord] = Field(default_factory=list)

    @classmethod
    def from_result(cls, bean: str, result: Any) -> "RecordReport":
        return cls(
            bean=bean,
            row_number=result.row_number,
            line_number=result.line_number,
            ok=result.ok,
            error=None if result.error is None else str(result.error),
            violations=[ViolationRecord.from_violation(v) for v in result.violations],
        )
