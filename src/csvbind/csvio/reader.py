from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Sequence

from csvbind.builder.factory import create_with
from csvbind.builder.schema import CompiledSchema, SchemaCompiler
from csvbind.builder.types import BuildCase
from csvbind.cellprocessor.base import CellContext, Strictness, ValidationViolation
from csvbind.csvio.records import RecordResult, check_on_error, iter_csv_records
from csvbind.declare.lifecycle import POST_READ, invoke_hooks
from csvbind.errors import BeanCreationError, ConfigurationError, LifecycleHookError, ProviderResolutionError

logger = logging.getLogger(__name__)


class BeanReader:
    """
    Populates beans from per-column raw values using a read schema.

    The compiled schema is shared and never modified; all per-record state
    lives in the CellContext objects created for each call.
    """

    def __init__(self, schema: CompiledSchema):
        if schema.case is not BuildCase.READ:
            raise ConfigurationError(f"BeanReader needs a read schema, got '{schema.case.value}'")
        self.schema = schema

    @classmethod
    def for_bean(cls, target: Any, groups: Optional[Iterable[Any]] = None, compiler: Optional[SchemaCompiler] = None) -> "BeanReader":
        compiler = compiler or SchemaCompiler()
        return cls(compiler.compile(target, BuildCase.READ, groups))

    @property
    def strictness(self) -> Strictness:
        return self.schema.env.strictness

    def read_values(self, values: Sequence[Optional[str]], row_number: Optional[int] = None,
                    line_number: Optional[int] = None) -> RecordResult:
        """
        Build one bean from `values` (index 0 = column 1). Missing trailing
        columns read as None. Post-read hooks run only for records without
        violations.
        """
        bean = create_with(self.schema.env.bean_factory, self.schema.target)
        violations: List[ValidationViolation] = []

        for proc in self.schema.processors:
            idx = proc.field.number - 1
            raw = values[idx] if idx < len(values) else None
            ctx = CellContext(proc.field, BuildCase.READ, row_number, line_number, violations)
            setattr(bean, proc.field.name, proc.execute(raw, ctx))
            if violations and self.strictness is Strictness.FAIL_FAST:
                break

        if not violations:
            invoke_hooks(bean, self.schema.hooks(POST_READ))
        else:
            logger.debug("row %s: %d violation(s)", row_number, len(violations))
        return RecordResult(bean=bean, violations=violations, row_number=row_number, line_number=line_number)

    def read_rows(self, rows: Iterable[Sequence[Optional[str]]], on_error: str = "raise") -> Iterator[RecordResult]:
        check_on_error(on_error)
        for row_number, values in enumerate(rows, start=1):
            yield self._read_one(values, row_number, None, on_error)

    def read_csv(
        self,
        path: Path,
        *,
        header: bool = False,
        delimiter: str = ",",
        encoding: str = "utf-8",
        on_error: str = "raise",
    ) -> Iterator[RecordResult]:
        """
        Read a CSV file record by record. With header=True the first record
        is skipped (it still counts as row 1).

        on_error="collect" turns bean creation, word provider and lifecycle
        failures into RecordResult.error instead of stopping the stream.
        """
        check_on_error(on_error)
        path = Path(path).expanduser()
        with path.open("r", newline="", encoding=encoding) as f:
            for row_number, line_number, values in iter_csv_records(f, delimiter):
                if header and row_number == 1:
                    continue
                yield self._read_one(values, row_number, line_number, on_error)

    def _read_one(self, values, row_number, line_number, on_error) -> RecordResult:
        try:
            return self.read_values(values, row_number, line_number)
        except (BeanCreationError, ProviderResolutionError, LifecycleHookError) as e:
            if on_error == "raise":
                raise
            logger.warning("row %s (line %s): %s", row_number, line_number, e)
            return RecordResult(row_number=row_number, line_number=line_number, error=e)
