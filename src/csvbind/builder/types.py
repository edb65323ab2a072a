from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

DEFAULT_GROUP = "default"


class BuildCase(str, Enum):
    READ = "read"
    WRITE = "write"

    @classmethod
    def parse(cls, value: Any) -> "BuildCase":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown build case {value!r}; expected one of {[c.value for c in cls]}") from None


def group_name(group: Any) -> str:
    """Groups may be given as strings or as marker classes."""
    if isinstance(group, str):
        return group
    if isinstance(group, type):
        return group.__qualname__
    raise TypeError(f"group must be a str or a class, got {type(group).__name__}")


@dataclass(frozen=True)
class FieldSpec:
    """
    One mapped column of a bean.

    `declarations` keeps the constraint/conversion declarations in the order
    they were attached; `builders` maps a declaration kind to a strategy that
    replaces the registered default for this field only.
    """

    owner: type
    name: str
    number: int
    label: str
    declarations: Tuple[Any, ...] = ()
    builders: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @property
    def owner_name(self) -> str:
        return getattr(self.owner, "__qualname__", str(self.owner))


@dataclass(frozen=True)
class ConstraintDescriptor:
    """
    One applied declaration on one field.

    attributes holds the kind-specific raw values (literal words, provider
    references, limits); the common keys live on the descriptor itself.
    """

    kind: str
    attributes: Mapping[str, Any]
    message: Optional[str] = None
    groups: FrozenSet[str] = frozenset()
    cases: FrozenSet[BuildCase] = frozenset()
    order: int = 0
    index: int = 0
    field: Optional[FieldSpec] = field(default=None, compare=False, repr=False)

    @property
    def sort_key(self) -> Tuple[int, str]:
        return (self.order, self.kind)

    def signature(self) -> Tuple[Any, ...]:
        return (self.kind, self.order, _freeze(self.attributes))


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return tuple(sorted((k, _freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return tuple(sorted(_freeze(v) for v in value))
    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    if callable(value):
        return getattr(value, "__qualname__", repr(value))
    return value


@dataclass(frozen=True)
class ProcessingContext:
    case: BuildCase = BuildCase.READ
    groups: FrozenSet[str] = frozenset({DEFAULT_GROUP})

    @classmethod
    def of(cls, case: Any = BuildCase.READ, groups: Optional[Iterable[Any]] = None) -> "ProcessingContext":
        names = frozenset(group_name(g) for g in (groups or ()))
        return cls(case=BuildCase.parse(case), groups=names or frozenset({DEFAULT_GROUP}))


@dataclass(frozen=True)
class BeanDescription:
    """
    Ahead-of-time description of one bean type: its fields ordered by column
    number, the descriptors attached to each field, and its lifecycle hooks.
    """

    target: type
    fields: Tuple[FieldSpec, ...]
    descriptors: Mapping[str, Tuple[ConstraintDescriptor, ...]]
    hooks: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return getattr(self.target, "__qualname__", str(self.target))

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def descriptors_for(self, name: str) -> Tuple[ConstraintDescriptor, ...]:
        return tuple(self.descriptors.get(name, ()))


BuilderStrategy = Callable[..., Any]
