from __future__ import annotations

from typing import Any, Callable, Dict, List, Tuple

from csvbind.errors import LifecycleHookError

POST_READ = "post_read"
PRE_WRITE = "pre_write"

_MARKER = "__csvbind_lifecycle__"


def _mark(event: str) -> Callable[[Callable], Callable]:
    def deco(fn: Callable) -> Callable:
        events = set(getattr(fn, _MARKER, ()))
        events.add(event)
        setattr(fn, _MARKER, frozenset(events))
        return fn
    return deco


# Runs once after a record has been fully populated from input.
post_read = _mark(POST_READ)

# Runs once before a bean is formatted for output.
pre_write = _mark(PRE_WRITE)


def discover_hooks(cls: type) -> Dict[str, Tuple[str, ...]]:
    """
    Return {event: method names} for every marked method of `cls`.

    Superclasses come before subclasses, declaration order within a class.
    A method overridden in a subclass keeps the position of its first
    declaration and is listed once.
    """
    found: Dict[str, List[str]] = {POST_READ: [], PRE_WRITE: []}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, member in vars(klass).items():
            fn = member.__func__ if isinstance(member, (staticmethod, classmethod)) else member
            for event in getattr(fn, _MARKER, ()):
                if name not in found[event]:
                    found[event].append(name)
    return {event: tuple(names) for event, names in found.items()}


def invoke_hooks(bean: Any, names: Tuple[str, ...]) -> None:
    for name in names:
        method = getattr(bean, name)
        try:
            method()
        except Exception as e:
            raise LifecycleHookError(type(bean).__qualname__, name, e) from e
