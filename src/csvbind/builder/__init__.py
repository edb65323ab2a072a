from . import types
from .types import DEFAULT_GROUP, BeanDescription, BuildCase, ConstraintDescriptor, FieldSpec, ProcessingContext

__all__ = [
    "types",
    "DEFAULT_GROUP",
    "BeanDescription",
    "BuildCase",
    "ConstraintDescriptor",
    "FieldSpec",
    "ProcessingContext",
]
