from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

from csvbind.builder.factory import create_with
from csvbind.builder.types import ConstraintDescriptor, FieldSpec
from csvbind.errors import BeanCreationError, ProviderResolutionError

logger = logging.getLogger(__name__)


@runtime_checkable
class ForbiddenWordProvider(Protocol):
    def get_forbidden_words(self, field: FieldSpec) -> Iterable[str]: ...


@runtime_checkable
class RequiredWordProvider(Protocol):
    def get_required_words(self, field: FieldSpec) -> Iterable[str]: ...


def _provider_name(provider: Any) -> str:
    return getattr(provider, "__qualname__", None) or type(provider).__qualname__


def _call_provider(provider: Any, method: str, field: FieldSpec, bean_factory: Any) -> List[str]:
    name = _provider_name(provider)
    try:
        instance = create_with(bean_factory, provider) if isinstance(provider, type) else provider
    except BeanCreationError as e:
        raise ProviderResolutionError(f"cannot create word provider '{name}': {e}", provider=name) from e

    fn = getattr(instance, method, None)
    if fn is None:
        if not callable(instance):
            raise ProviderResolutionError(f"'{name}' has no '{method}' and is not callable", provider=name)
        fn = instance
    try:
        words = fn(field)
        if words is None:
            raise TypeError(f"{method} returned None")
        return [str(w) for w in words]
    except Exception as e:
        raise ProviderResolutionError(f"word provider '{name}' failed for '{field.label}': {e}", provider=name) from e


def resolve_vocabulary(
    descriptor: ConstraintDescriptor,
    field: FieldSpec,
    bean_factory: Any,
    method: str = "get_forbidden_words",
) -> List[str]:
    """
    Literal words first (verbatim, duplicates kept), then each provider's
    words in declaration order.
    """
    words: List[str] = list(descriptor.attributes.get("value", ()))
    for provider in descriptor.attributes.get("provider", ()):
        provided = _call_provider(provider, method, field, bean_factory)
        logger.debug("provider %s returned %d word(s) for %s", _provider_name(provider), len(provided), field.label)
        words.extend(provided)
    return words


class Vocabulary(ABC):
    """Words used by a word-forbid / word-require operation."""

    @abstractmethod
    def words(self) -> Tuple[str, ...]:
        ...

    @abstractmethod
    def signature(self) -> Tuple[Any, ...]:
        ...


class StaticVocabulary(Vocabulary):
    """Resolved once at compile time."""

    def __init__(self, words: Iterable[str]):
        self._words = tuple(words)

    def words(self) -> Tuple[str, ...]:
        return self._words

    def signature(self) -> Tuple[Any, ...]:
        return ("static", self._words)


class ProviderVocabulary(Vocabulary):
    """Re-resolved on every call so refreshed external sources are seen."""

    def __init__(self, descriptor: ConstraintDescriptor, field: FieldSpec, bean_factory: Any, method: str):
        self.descriptor = descriptor
        self.field = field
        self.bean_factory = bean_factory
        self.method = method

    def words(self) -> Tuple[str, ...]:
        return tuple(resolve_vocabulary(self.descriptor, self.field, self.bean_factory, self.method))

    def signature(self) -> Tuple[Any, ...]:
        return ("per_call", self.descriptor.signature())


class FileWordProvider:
    """
    Reads one word per line from a UTF-8 text file. Blank lines and lines
    starting with '#' are skipped.

    Usable for both forbidden and required words.
    """

    def __init__(self, path: Optional[Path] = None, encoding: str = "utf-8"):
        self.path = Path(path) if path is not None else None
        self.encoding = encoding

    def _read(self, field: FieldSpec) -> List[str]:
        if self.path is None:
            raise FileNotFoundError(f"no word file configured for '{field.label}'")
        lines = self.path.read_text(encoding=self.encoding).splitlines()
        return [ln.strip() for ln in lines if ln.strip() and not ln.lstrip().startswith("#")]

    def get_forbidden_words(self, field: FieldSpec) -> List[str]:
        return self._read(field)

    def get_required_words(self, field: FieldSpec) -> List[str]:
        return self._read(field)
