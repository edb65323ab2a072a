from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from csvbind.builder.types import BeanDescription, ConstraintDescriptor, FieldSpec
from csvbind.declare.constraints import Declaration, lookup_declaration
from csvbind.declare.lifecycle import discover_hooks
from csvbind.errors import ConfigurationError

COLUMN_KEY = "csvbind.column"
DESCRIPTION_ATTR = "__csv_bean__"


@dataclass(frozen=True)
class Column:
    """
    Column mapping for one field.

    number:      1-based column position, unique within a bean
    label:       header / display label, defaults to the field name
    builders:    {kind: strategy} overriding the default builder for this field
    constraints: ordered constraint and conversion declarations
    """

    number: int
    label: Optional[str] = None
    builders: Mapping[str, Any] = field(default_factory=dict)
    constraints: Tuple[Declaration, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "constraints", tuple(self.constraints or ()))
        object.__setattr__(self, "builders", dict(self.builders or {}))


def column(
    number: int,
    label: Optional[str] = None,
    *,
    constraints: Iterable[Declaration] = (),
    builders: Optional[Mapping[str, Any]] = None,
    default: Any = None,
):
    """dataclasses.field() carrying a Column in its metadata."""
    col = Column(number=number, label=label, builders=builders or {}, constraints=tuple(constraints))
    return dataclasses.field(default=default, metadata={COLUMN_KEY: col})


def _normalize_builders(builders: Mapping[str, Any]) -> Dict[str, Any]:
    return {lookup_declaration(kind).KIND: strategy for kind, strategy in builders.items()}


def build_description(target: type, columns: Mapping[str, Column]) -> BeanDescription:
    """Turn {field name: Column} into a BeanDescription, checking column numbers."""
    seen: Dict[int, str] = {}
    specs: List[FieldSpec] = []
    for name, col in columns.items():
        if not isinstance(col, Column):
            raise ConfigurationError(f"{name}: expected Column, got {type(col).__name__}")
        number = col.number
        if isinstance(number, bool) or not isinstance(number, int) or number < 1:
            raise ConfigurationError(f"{target.__qualname__}.{name}: column number must be an int >= 1, got {number!r}")
        if number in seen:
            raise ConfigurationError(
                f"{target.__qualname__}: column number {number} is used by both '{seen[number]}' and '{name}'"
            )
        seen[number] = name
        for decl in col.constraints:
            if not isinstance(decl, Declaration):
                raise ConfigurationError(f"{target.__qualname__}.{name}: not a declaration: {decl!r}")
        specs.append(FieldSpec(
            owner=target,
            name=name,
            number=number,
            label=col.label or name,
            declarations=col.constraints,
            builders=_normalize_builders(col.builders),
        ))

    specs.sort(key=lambda s: s.number)
    descriptors: Dict[str, Tuple[ConstraintDescriptor, ...]] = {
        spec.name: tuple(decl.to_descriptor(spec, i) for i, decl in enumerate(spec.declarations))
        for spec in specs
    }
    return BeanDescription(target=target, fields=tuple(specs), descriptors=descriptors, hooks=discover_hooks(target))


def _scan_columns(cls: type) -> Dict[str, Column]:
    columns: Dict[str, Column] = {}
    for klass in reversed(cls.__mro__):
        for name, member in vars(klass).items():
            if isinstance(member, Column):
                columns[name] = member
    if dataclasses.is_dataclass(cls):
        for f in dataclasses.fields(cls):
            col = f.metadata.get(COLUMN_KEY)
            if col is not None:
                columns[f.name] = col
    return columns


def csv_bean(cls: type) -> type:
    """
    Class decorator: scan the class once and attach its BeanDescription.

    Works on dataclasses whose fields use column(...) and on plain classes,
    protocols and ABCs that declare Column(...) class attributes.
    """
    columns = _scan_columns(cls)
    if not columns:
        raise ConfigurationError(f"{cls.__qualname__} declares no columns")
    setattr(cls, DESCRIPTION_ATTR, build_description(cls, columns))
    return cls


def describe_bean(target: type, columns: Mapping[str, Column]) -> BeanDescription:
    """Register an explicit description for `target` without decorating it."""
    desc = build_description(target, columns)
    setattr(target, DESCRIPTION_ATTR, desc)
    return desc


def get_description(target: Any) -> BeanDescription:
    if isinstance(target, BeanDescription):
        return target
    desc = vars(target).get(DESCRIPTION_ATTR) if isinstance(target, type) else None
    if desc is None:
        name = getattr(target, "__qualname__", repr(target))
        raise ConfigurationError(f"{name} is not a csv bean; decorate it with @csv_bean or call describe_bean()")
    return desc
