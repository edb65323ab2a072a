from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from csvbind.builder.factory import DefaultBeanFactory, create_with
from csvbind.builder.providers import ProviderVocabulary, StaticVocabulary, Vocabulary, resolve_vocabulary
from csvbind.builder.types import ConstraintDescriptor, FieldSpec, ProcessingContext
from csvbind.cellprocessor import constraint, conversion
from csvbind.cellprocessor.base import ColumnProcessor, Operation, PassThrough, Strictness
from csvbind.errors import BeanCreationError, ConfigurationError
from csvbind.messages.resolver import MessageResolver

logger = logging.getLogger(__name__)

VOCABULARY_COMPILE = "compile"
VOCABULARY_PER_CALL = "per_call"


@dataclass(frozen=True)
class BuildEnv:
    """What every builder strategy may use besides the descriptor itself."""

    messages: MessageResolver = field(default_factory=MessageResolver)
    strictness: Strictness = Strictness.ACCUMULATE
    bean_factory: Any = field(default_factory=DefaultBeanFactory)
    vocabulary_mode: str = VOCABULARY_COMPILE


# ------------------------
# Default strategies
# ------------------------
# strategy(descriptor, attributes, next_op, env) -> Operation

def build_word_forbid(descriptor, attributes, next_op, env):
    return constraint.WordForbid(descriptor, attributes["vocabulary"], env.messages, env.strictness, next_op)


def build_word_require(descriptor, attributes, next_op, env):
    return constraint.WordRequire(descriptor, attributes["vocabulary"], env.messages, env.strictness, next_op)


def build_required(descriptor, attributes, next_op, env):
    return constraint.Required(descriptor, env.messages, env.strictness, next_op)


def build_length_max(descriptor, attributes, next_op, env):
    return constraint.LengthMax(descriptor, attributes["value"], env.messages, env.strictness, next_op)


def build_trim(descriptor, attributes, next_op, env):
    return conversion.Trim(descriptor, next_op)


def build_upper(descriptor, attributes, next_op, env):
    return conversion.Upper(descriptor, next_op)


def build_lower(descriptor, attributes, next_op, env):
    return conversion.Lower(descriptor, next_op)


BUILDER_REGISTRY: Dict[str, Callable[..., Operation]] = {
    # constraints
    "csvbind.constraint.WordForbid": build_word_forbid,
    "csvbind.constraint.WordRequire": build_word_require,
    "csvbind.constraint.Required": build_required,
    "csvbind.constraint.LengthMax": build_length_max,

    # conversions
    "csvbind.conversion.Trim": build_trim,
    "csvbind.conversion.Upper": build_upper,
    "csvbind.conversion.Lower": build_lower,
}

# kinds whose attributes carry a vocabulary -> provider operation name
VOCABULARY_METHODS: Dict[str, str] = {
    "csvbind.constraint.WordForbid": "get_forbidden_words",
    "csvbind.constraint.WordRequire": "get_required_words",
}


def register_builder(kind: str, strategy: Callable[..., Operation], vocabulary_method: Optional[str] = None) -> None:
    BUILDER_REGISTRY[kind] = strategy
    if vocabulary_method:
        VOCABULARY_METHODS[kind] = vocabulary_method


class ChainBuilder:
    """
    Turns the selected descriptors of one field into a ColumnProcessor.

    Descriptors are walked last to first; each built operation wraps the
    chain built so far, so the first descriptor runs first.
    """

    def __init__(self, env: Optional[BuildEnv] = None, registry: Optional[Mapping[str, Callable[..., Operation]]] = None):
        self.env = env or BuildEnv()
        self.registry = dict(BUILDER_REGISTRY if registry is None else registry)

    def vocabulary_for(self, descriptor: ConstraintDescriptor, field: FieldSpec, method: str) -> Vocabulary:
        if self.env.vocabulary_mode == VOCABULARY_PER_CALL and descriptor.attributes.get("provider"):
            return ProviderVocabulary(descriptor, field, self.env.bean_factory, method)
        return StaticVocabulary(resolve_vocabulary(descriptor, field, self.env.bean_factory, method))

    def resolve_attributes(self, descriptor: ConstraintDescriptor, field: FieldSpec) -> Dict[str, Any]:
        attributes = dict(descriptor.attributes)
        method = VOCABULARY_METHODS.get(descriptor.kind)
        if method is not None:
            attributes["vocabulary"] = self.vocabulary_for(descriptor, field, method)
        return attributes

    def strategy_for(self, field: FieldSpec, kind: str) -> Callable[..., Operation]:
        strategy = field.builders.get(kind)
        if strategy is None:
            strategy = self.registry.get(kind)
            if strategy is None:
                raise ConfigurationError(f"{field.owner_name}.{field.name}: no builder registered for '{kind}'")
            return strategy

        if isinstance(strategy, type):
            try:
                strategy = create_with(self.env.bean_factory, strategy)
            except BeanCreationError as e:
                raise ConfigurationError(f"{field.owner_name}.{field.name}: cannot create builder for '{kind}': {e}") from e
        build = getattr(strategy, "build", None)
        if callable(build):
            return build
        if callable(strategy):
            return strategy
        raise ConfigurationError(f"{field.owner_name}.{field.name}: builder for '{kind}' is not callable")

    def build(self, field: FieldSpec, descriptors: Iterable[ConstraintDescriptor], context: ProcessingContext) -> ColumnProcessor:
        descriptors = tuple(descriptors)
        op: Operation = PassThrough()
        for descriptor in reversed(descriptors):
            strategy = self.strategy_for(field, descriptor.kind)
            attributes = self.resolve_attributes(descriptor, field)
            op = strategy(descriptor, attributes, op, self.env)
            if not isinstance(op, Operation):
                raise ConfigurationError(
                    f"{field.owner_name}.{field.name}: builder for '{descriptor.kind}' returned {type(op).__name__}, not an Operation"
                )
        processor = ColumnProcessor(field=field, case=context.case, head=op, descriptors=descriptors)
        logger.debug("column %d (%s) %s: %s", field.number, field.label, context.case.value, list(processor.kinds) or "identity")
        return processor
