from __future__ import annotations

import csv as _csv
from dataclasses import dataclass, field
from typing import IO, Any, Iterator, List, Optional, Tuple

from csvbind.cellprocessor.base import ValidationViolation
from csvbind.errors import CsvBindError

# how per-record failures (bean creation, providers, lifecycle hooks) are handled
ON_ERROR = {"raise", "collect"}


def check_on_error(on_error: str) -> None:
    if on_error not in ON_ERROR:
        raise ValueError(f"on_error must be one of {sorted(ON_ERROR)}, got {on_error!r}")


@dataclass
class RecordResult:
    """Outcome of processing one record."""

    bean: Any = None
    violations: List[ValidationViolation] = field(default_factory=list)
    row_number: Optional[int] = None
    line_number: Optional[int] = None
    values: Optional[List[str]] = None
    error: Optional[CsvBindError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.violations

    def messages(self) -> List[str]:
        out = [v.message for v in self.violations]
        if self.error is not None:
            out.append(str(self.error))
        return out


def iter_csv_records(f: IO[str], delimiter: str = ",") -> Iterator[Tuple[int, int, List[str]]]:
    """
    Yield (row_number, line_number, values) for every non-empty record.

    line_number is the physical line the record starts on, so quoted values
    with embedded line breaks push later records further down.
    """
    reader = _csv.reader(f, delimiter=delimiter)
    prev_line = 0
    row_number = 0
    for values in reader:
        start = prev_line + 1
        prev_line = reader.line_num
        if not values:
            continue
        row_number += 1
        yield row_number, start, values
