from .reader import BeanReader
from .records import RecordResult, iter_csv_records
from .writer import BeanWriter

__all__ = [
    "BeanReader",
    "BeanWriter",
    "RecordResult",
    "iter_csv_records",
]
