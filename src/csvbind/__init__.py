from . import errors
from . import builder
from . import cellprocessor
from . import messages
from . import declare
from .builder import chain, factory, loader, ordering, providers, schema
from . import config
from . import csvio

from .builder.types import DEFAULT_GROUP, BuildCase, ProcessingContext
from .builder.schema import CompiledSchema, SchemaCompiler
from .builder.providers import FileWordProvider
from .cellprocessor.base import Strictness, ValidationViolation
from .config import BindConfig, load_config
from .csvio import BeanReader, BeanWriter, RecordResult
from .declare import (
    Column,
    LengthMax,
    Lower,
    Required,
    Trim,
    Upper,
    WordForbid,
    WordRequire,
    column,
    csv_bean,
    describe_bean,
    post_read,
    pre_write,
)

__all__ = [
    "errors",
    "builder",
    "cellprocessor",
    "messages",
    "declare",
    "config",
    "csvio",
    "DEFAULT_GROUP",
    "BuildCase",
    "ProcessingContext",
    "CompiledSchema",
    "SchemaCompiler",
    "FileWordProvider",
    "Strictness",
    "ValidationViolation",
    "BindConfig",
    "load_config",
    "BeanReader",
    "BeanWriter",
    "RecordResult",
    "Column",
    "column",
    "csv_bean",
    "describe_bean",
    "post_read",
    "pre_write",
    "WordForbid",
    "WordRequire",
    "Required",
    "LengthMax",
    "Trim",
    "Upper",
    "Lower",
]
