from .column import Column, column, csv_bean, describe_bean, get_description, build_description
from .constraints import (
    DECLARATION_REGISTRY,
    Declaration,
    LengthMax,
    Lower,
    Required,
    Trim,
    Upper,
    WordForbid,
    WordRequire,
    lookup_declaration,
    register_declaration,
)
from .lifecycle import post_read, pre_write, discover_hooks

__all__ = [
    "Column",
    "column",
    "csv_bean",
    "describe_bean",
    "get_description",
    "build_description",
    "Declaration",
    "DECLARATION_REGISTRY",
    "register_declaration",
    "lookup_declaration",
    "WordForbid",
    "WordRequire",
    "Required",
    "LengthMax",
    "Trim",
    "Upper",
    "Lower",
    "post_read",
    "pre_write",
    "discover_hooks",
]
