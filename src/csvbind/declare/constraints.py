from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Optional, Tuple, Type

from csvbind.builder.types import BuildCase, ConstraintDescriptor, FieldSpec, group_name
from csvbind.errors import ConfigurationError

COMMON_ATTRIBUTES = ("message", "cases", "groups", "order")

# kind -> declaration class
DECLARATION_REGISTRY: Dict[str, Type["Declaration"]] = {}


def register_declaration(cls: Type["Declaration"]) -> Type["Declaration"]:
    if not cls.KIND:
        raise ConfigurationError(f"{cls.__name__} does not define KIND")
    DECLARATION_REGISTRY[cls.KIND] = cls
    return cls


def lookup_declaration(name: str) -> Type["Declaration"]:
    """Find a declaration class by full kind (csvbind.constraint.WordForbid) or short name (WordForbid)."""
    if name in DECLARATION_REGISTRY:
        return DECLARATION_REGISTRY[name]
    matches = [cls for kind, cls in DECLARATION_REGISTRY.items() if kind.rsplit(".", 1)[-1] == name]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise ConfigurationError(f"Unknown declaration kind '{name}'")
    raise ConfigurationError(f"Ambiguous declaration kind '{name}': {sorted(c.KIND for c in matches)}")


def _as_tuple(value: Any) -> Tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
        return (value,)
    return tuple(value)


@dataclass(frozen=True, kw_only=True)
class Declaration:
    """
    Base for constraint and conversion declarations attached to a column.

    message: inline template or "{property.key}"; None uses "{KIND.message}".
    cases:   build cases the declaration applies to; empty = all.
    groups:  groups the declaration belongs to; empty = the default group.
    order:   higher runs later; ties are broken by KIND.
    """

    KIND: ClassVar[str] = ""

    message: Optional[str] = None
    cases: Tuple[Any, ...] = ()
    groups: Tuple[Any, ...] = ()
    order: int = 0

    def __post_init__(self):
        if isinstance(self.order, bool) or not isinstance(self.order, int):
            raise ConfigurationError(f"{self.KIND}: order must be an int, got {self.order!r}")
        try:
            cases = tuple(BuildCase.parse(c) for c in _as_tuple(self.cases))
        except ValueError as e:
            raise ConfigurationError(f"{self.KIND}: {e}") from e
        try:
            groups = tuple(group_name(g) for g in _as_tuple(self.groups))
        except TypeError as e:
            raise ConfigurationError(f"{self.KIND}: {e}") from e
        object.__setattr__(self, "cases", cases)
        object.__setattr__(self, "groups", groups)

    @property
    def message_template(self) -> str:
        return self.message or "{" + self.KIND + ".message}"

    def attributes(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name not in COMMON_ATTRIBUTES}

    def to_descriptor(self, field: Optional[FieldSpec] = None, index: int = 0) -> ConstraintDescriptor:
        return ConstraintDescriptor(
            kind=self.KIND,
            attributes=self.attributes(),
            message=self.message_template,
            groups=frozenset(self.groups),
            cases=frozenset(self.cases),
            order=self.order,
            index=index,
            field=field,
        )


@dataclass(frozen=True, kw_only=True)
class _WordDeclaration(Declaration):
    # name of the provider operation used to fetch extra words
    PROVIDER_METHOD: ClassVar[str] = ""

    value: Tuple[str, ...] = ()
    provider: Tuple[Any, ...] = ()

    def __post_init__(self):
        super().__post_init__()
        words = _as_tuple(self.value)
        for w in words:
            if not isinstance(w, str):
                raise ConfigurationError(f"{self.KIND}: words must be strings, got {w!r}")
        object.__setattr__(self, "value", words)
        object.__setattr__(self, "provider", _as_tuple(self.provider))
        if not self.value and not self.provider:
            raise ConfigurationError(f"{self.KIND}: either value or provider must be given")


@register_declaration
@dataclass(frozen=True)
class WordForbid(_WordDeclaration):
    """Value must not contain any of the words (literal and/or provided)."""

    KIND: ClassVar[str] = "csvbind.constraint.WordForbid"
    PROVIDER_METHOD: ClassVar[str] = "get_forbidden_words"

    value: Tuple[str, ...] = ()


@register_declaration
@dataclass(frozen=True)
class WordRequire(_WordDeclaration):
    """Value must contain every one of the words."""

    KIND: ClassVar[str] = "csvbind.constraint.WordRequire"
    PROVIDER_METHOD: ClassVar[str] = "get_required_words"

    value: Tuple[str, ...] = ()


@register_declaration
@dataclass(frozen=True)
class Required(Declaration):
    KIND: ClassVar[str] = "csvbind.constraint.Required"


@register_declaration
@dataclass(frozen=True)
class LengthMax(Declaration):
    KIND: ClassVar[str] = "csvbind.constraint.LengthMax"

    value: int = 0

    def __post_init__(self):
        super().__post_init__()
        if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value < 0:
            raise ConfigurationError(f"{self.KIND}: value must be a non-negative int, got {self.value!r}")


@register_declaration
@dataclass(frozen=True)
class Trim(Declaration):
    KIND: ClassVar[str] = "csvbind.conversion.Trim"


@register_declaration
@dataclass(frozen=True)
class Upper(Declaration):
    KIND: ClassVar[str] = "csvbind.conversion.Upper"


@register_declaration
@dataclass(frozen=True)
class Lower(Declaration):
    KIND: ClassVar[str] = "csvbind.conversion.Lower"
