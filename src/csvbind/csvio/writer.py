from __future__ import annotations

import csv as _csv
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional

from csvbind.builder.schema import CompiledSchema, SchemaCompiler
from csvbind.builder.types import BuildCase
from csvbind.cellprocessor.base import CellContext, Strictness, ValidationViolation
from csvbind.csvio.records import RecordResult, check_on_error
from csvbind.declare.lifecycle import PRE_WRITE, invoke_hooks
from csvbind.errors import ConfigurationError, LifecycleHookError, ProviderResolutionError

logger = logging.getLogger(__name__)


class BeanWriter:
    """Formats beans into per-column strings using a write schema."""

    def __init__(self, schema: CompiledSchema):
        if schema.case is not BuildCase.WRITE:
            raise ConfigurationError(f"BeanWriter needs a write schema, got '{schema.case.value}'")
        self.schema = schema
        self.width = max((p.field.number for p in schema.processors), default=0)

    @classmethod
    def for_bean(cls, target: Any, groups: Optional[Iterable[Any]] = None, compiler: Optional[SchemaCompiler] = None) -> "BeanWriter":
        compiler = compiler or SchemaCompiler()
        return cls(compiler.compile(target, BuildCase.WRITE, groups))

    def header(self) -> List[str]:
        out = [""] * self.width
        for p in self.schema.processors:
            out[p.field.number - 1] = p.field.label
        return out

    def write_bean(self, bean: Any, row_number: Optional[int] = None) -> RecordResult:
        invoke_hooks(bean, self.schema.hooks(PRE_WRITE))
        values = [""] * self.width
        violations: List[ValidationViolation] = []
        for proc in self.schema.processors:
            ctx = CellContext(proc.field, BuildCase.WRITE, row_number, None, violations)
            out = proc.execute(getattr(bean, proc.field.name, None), ctx)
            values[proc.field.number - 1] = "" if out is None else str(out)
            if violations and self.schema.env.strictness is Strictness.FAIL_FAST:
                break
        return RecordResult(bean=bean, violations=violations, row_number=row_number, values=values)

    def write_csv(self, beans: Iterable[Any], path: Path, *, header: bool = True,
                  delimiter: str = ",", encoding: str = "utf-8", on_error: str = "raise") -> List[RecordResult]:
        """
        Write every bean; records with violations are reported and left out
        of the file.

        on_error="collect" turns pre-write hook and word provider failures
        into RecordResult.error for that bean and keeps writing.
        """
        check_on_error(on_error)
        path = Path(path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        results: List[RecordResult] = []
        with path.open("w", newline="", encoding=encoding) as f:
            w = _csv.writer(f, delimiter=delimiter)
            row_number = 0
            if header:
                w.writerow(self.header())
                row_number += 1
            for bean in beans:
                row_number += 1
                try:
                    res = self.write_bean(bean, row_number)
                except (ProviderResolutionError, LifecycleHookError) as e:
                    if on_error == "raise":
                        raise
                    logger.warning("row %s: %s", row_number, e)
                    res = RecordResult(bean=bean, row_number=row_number, error=e)
                if res.ok:
                    w.writerow(res.values)
                results.append(res)
        return results
