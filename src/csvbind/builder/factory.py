from __future__ import annotations

import inspect
import threading
from typing import Any, Dict, Iterable, List, Optional

from csvbind.errors import BeanCreationError

_ADAPTERS: Dict[type, type] = {}
_ADAPTERS_LOCK = threading.Lock()


def is_interface(target: type) -> bool:
    """Protocols and abstract classes are treated as interface contracts."""
    return bool(getattr(target, "_is_protocol", False)) or inspect.isabstract(target)


def _contract_properties(contract: type, extra: Iterable[str] = ()) -> List[str]:
    names: List[str] = []
    for klass in reversed(contract.__mro__):
        if klass is object:
            continue
        for name in inspect.get_annotations(klass):
            if not name.startswith("_") and name not in names:
                names.append(name)
        for name, member in vars(klass).items():
            if isinstance(member, property) and getattr(member.fget, "__isabstractmethod__", False):
                if name not in names:
                    names.append(name)
    for name in extra:
        if name not in names:
            names.append(name)
    return names


def _make_property(name: str) -> property:
    def fget(self):
        return self._values.get(name)

    def fset(self, value):
        self._values[name] = value

    return property(fget, fset, doc=f"'{name}' backed by the adapter value map")


def interface_adapter(contract: type, field_names: Iterable[str] = ()) -> type:
    """
    Concrete class implementing `contract` with every annotated attribute and
    abstract property stored in a per-instance dict.

    Built once per contract and cached.
    """
    with _ADAPTERS_LOCK:
        adapter = _ADAPTERS.get(contract)
        if adapter is not None:
            return adapter

        def __init__(self):
            self._values = {}

        def __repr__(self):
            return f"{contract.__qualname__}Adapter({self._values!r})"

        namespace: Dict[str, Any] = {"__init__": __init__, "__repr__": __repr__}
        for name in _contract_properties(contract, field_names):
            namespace[name] = _make_property(name)

        adapter = type(contract)(f"{contract.__name__}Adapter", (contract,), namespace)
        _ADAPTERS[contract] = adapter
        return adapter


class DefaultBeanFactory:
    """
    Creates bean instances: concrete classes through their zero-argument
    constructor, interface contracts through a generated adapter.
    """

    def __init__(self, field_names: Optional[Dict[type, Iterable[str]]] = None):
        # extra property names for contracts that do not annotate all fields
        self.field_names = dict(field_names or {})

    def create(self, target: type) -> Any:
        if target is None:
            raise ValueError("target should not be None")
        try:
            if is_interface(target):
                return interface_adapter(target, self.field_names.get(target, ()))()
            return target()
        except Exception as e:
            raise BeanCreationError(getattr(target, "__qualname__", repr(target)), e) from e


def create_with(factory: Any, target: type) -> Any:
    """Use a BeanFactory object or a plain callable to create `target`."""
    create = getattr(factory, "create", None)
    if create is None:
        create = factory
    try:
        return create(target)
    except BeanCreationError:
        raise
    except Exception as e:
        raise BeanCreationError(getattr(target, "__qualname__", repr(target)), e) from e
