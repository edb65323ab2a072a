from __future__ import annotations

from typing import Iterable, List

from csvbind.builder.types import DEFAULT_GROUP, ConstraintDescriptor, ProcessingContext


def applies_to_case(descriptor: ConstraintDescriptor, context: ProcessingContext) -> bool:
    return not descriptor.cases or context.case in descriptor.cases


def applies_to_groups(descriptor: ConstraintDescriptor, context: ProcessingContext) -> bool:
    if not descriptor.groups:
        return DEFAULT_GROUP in context.groups
    return bool(descriptor.groups & context.groups)


def select(descriptors: Iterable[ConstraintDescriptor], context: ProcessingContext) -> List[ConstraintDescriptor]:
    """
    Active descriptors for `context`, ordered by (order, kind).

    sorted() is stable, so descriptors of the same kind and order keep their
    declaration order.
    """
    active = [
        d for d in descriptors
        if applies_to_case(d, context) and applies_to_groups(d, context)
    ]
    return sorted(active, key=lambda d: d.sort_key)
