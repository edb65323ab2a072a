from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from csvbind.builder.chain import BuildEnv, ChainBuilder
from csvbind.builder.factory import interface_adapter, is_interface
from csvbind.builder.ordering import select
from csvbind.builder.types import BeanDescription, BuildCase, ProcessingContext
from csvbind.cellprocessor.base import ColumnProcessor
from csvbind.declare.column import get_description
from csvbind.errors import ConfigurationError

logger = logging.getLogger(__name__)

CacheKey = Tuple[type, BuildCase, FrozenSet[str]]


@dataclass(frozen=True)
class CompiledSchema:
    """All column processors of one bean for one (case, groups) context."""

    description: BeanDescription
    context: ProcessingContext
    processors: Tuple[ColumnProcessor, ...]
    env: BuildEnv = field(default_factory=BuildEnv, compare=False, repr=False)

    @property
    def target(self) -> type:
        return self.description.target

    @property
    def case(self) -> BuildCase:
        return self.context.case

    def processor_for(self, name: str) -> ColumnProcessor:
        for p in self.processors:
            if p.field.name == name:
                return p
        raise KeyError(name)

    def hooks(self, event: str) -> Tuple[str, ...]:
        return tuple(self.description.hooks.get(event, ()))

    def signature(self) -> Tuple[Any, ...]:
        return tuple(p.signature() for p in self.processors)

    def summary(self) -> Dict[str, Any]:
        return {
            "bean": self.description.name,
            "case": self.case.value,
            "groups": sorted(self.context.groups),
            "columns": [
                {
                    "number": p.field.number,
                    "field": p.field.name,
                    "label": p.field.label,
                    "chain": list(p.kinds),
                }
                for p in self.processors
            ],
        }


def _check_columns(desc: BeanDescription) -> None:
    seen: Dict[int, str] = {}
    for f in desc.fields:
        if f.number < 1:
            raise ConfigurationError(f"{desc.name}.{f.name}: column number must be >= 1, got {f.number}")
        if f.number in seen:
            raise ConfigurationError(f"{desc.name}: column number {f.number} is used by both '{seen[f.number]}' and '{f.name}'")
        seen[f.number] = f.name


class SchemaCompiler:
    """
    Compiles and caches CompiledSchema objects per (bean, case, groups).

    Each key is built at most once: concurrent compiles of one key wait on
    that key's lock, other keys build in parallel. The per-key locks are
    reentrant, so a builder strategy may compile other beans.
    Entries stay cached until invalidate() / recompile().
    """

    def __init__(self, env: Optional[BuildEnv] = None, registry=None):
        self.env = env or BuildEnv()
        self.builder = ChainBuilder(self.env, registry)
        self._cache: Dict[CacheKey, CompiledSchema] = {}
        self._lock = threading.Lock()
        self._key_locks: Dict[CacheKey, Any] = {}

    @classmethod
    def from_config(cls, config, registry=None) -> "SchemaCompiler":
        return cls(config.build_env(), registry)

    @staticmethod
    def key(desc: BeanDescription, context: ProcessingContext) -> CacheKey:
        return (desc.target, context.case, context.groups)

    def compile(self, target: Any, case: Any = BuildCase.READ, groups: Optional[Iterable[Any]] = None) -> CompiledSchema:
        desc = get_description(target)
        context = ProcessingContext.of(case, groups)
        key = self.key(desc, context)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("schema cache hit: %s %s %s", desc.name, context.case.value, sorted(context.groups))
                return cached
            key_lock = self._key_locks.setdefault(key, threading.RLock())

        with key_lock:
            with self._lock:
                cached = self._cache.get(key)
            if cached is not None:
                return cached
            schema = self._build(desc, context)
            with self._lock:
                self._cache[key] = schema
            return schema

    def recompile(self, target: Any, case: Any = BuildCase.READ, groups: Optional[Iterable[Any]] = None) -> CompiledSchema:
        desc = get_description(target)
        with self._lock:
            self._cache.pop(self.key(desc, ProcessingContext.of(case, groups)), None)
        return self.compile(desc, case, groups)

    def invalidate(self, target: Any = None) -> int:
        """Drop cached schemas for `target` (all when None). Returns the number dropped."""
        with self._lock:
            if target is None:
                n = len(self._cache)
                self._cache.clear()
                return n
            bean = get_description(target).target
            keys = [k for k in self._cache if k[0] is bean]
            for k in keys:
                del self._cache[k]
            return len(keys)

    def _build(self, desc: BeanDescription, context: ProcessingContext) -> CompiledSchema:
        _check_columns(desc)
        if is_interface(desc.target):
            interface_adapter(desc.target, desc.field_names())
        processors = tuple(
            self.builder.build(f, select(desc.descriptors_for(f.name), context), context)
            for f in desc.fields
        )
        logger.info(
            "compiled %s for %s %s (%d column(s))",
            desc.name, context.case.value, sorted(context.groups), len(processors),
        )
        return CompiledSchema(description=desc, context=context, processors=processors, env=self.env)
