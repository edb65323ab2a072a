from __future__ import annotations

import dataclasses
import importlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import jsonschema
import yaml

from csvbind.builder.types import BeanDescription
from csvbind.declare.column import Column, describe_bean
from csvbind.declare.constraints import Declaration, lookup_declaration
from csvbind.errors import ConfigurationError

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "bean_description.schema.json"


@dataclass
class DescriptionDocument:
    version: str
    delimiter: str
    header: bool
    description: BeanDescription


def _load_schema(path: Path = SCHEMA_PATH) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def validate_doc(doc: Dict[str, Any], schema_path: Path = SCHEMA_PATH) -> None:
    try:
        jsonschema.validate(instance=doc, schema=_load_schema(schema_path))
    except jsonschema.ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigurationError(f"invalid bean description at {where}: {e.message}") from e


def import_ref(ref: str) -> Any:
    """Resolve "package.module:attr" to the object it names."""
    if ":" not in ref:
        raise ConfigurationError(f"expected 'module:attr' reference, got '{ref}'")
    module_name, attr = ref.split(":", 1)
    try:
        obj: Any = importlib.import_module(module_name)
        for part in attr.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"cannot resolve '{ref}': {e}") from e
    return obj


def _resolve(ref: Any, registry: Mapping[str, Any], what: str) -> Any:
    if not isinstance(ref, str):
        return ref
    if ref in registry:
        return registry[ref]
    if ":" in ref:
        return import_ref(ref)
    raise ConfigurationError(f"unknown {what} '{ref}'; register it by name or use 'module:attr'")


def normalize_constraints(items: List[dict], providers: Mapping[str, Any]) -> List[Declaration]:
    out: List[Declaration] = []
    for item in items or []:
        attrs = dict(item)
        cls = lookup_declaration(attrs.pop("kind"))
        if "provider" in attrs:
            attrs["provider"] = tuple(_resolve(p, providers, "provider") for p in attrs["provider"] or [])
        try:
            out.append(cls(**attrs))
        except TypeError as e:
            raise ConfigurationError(f"{cls.KIND}: {e}") from e
    return out


def normalize_columns(fields: List[dict], providers: Mapping[str, Any], builders: Mapping[str, Any]) -> Dict[str, Column]:
    columns: Dict[str, Column] = {}
    for f in fields or []:
        name = f["name"]
        if name in columns:
            raise ConfigurationError(f"field '{name}' is described twice")
        columns[name] = Column(
            number=f["number"],
            label=f.get("label"),
            builders={kind: _resolve(ref, builders, "builder") for kind, ref in (f.get("builders") or {}).items()},
            constraints=tuple(normalize_constraints(f.get("constraints", []), providers)),
        )
    return columns


def _record_type(name: str, field_names: List[str]) -> type:
    return dataclasses.make_dataclass(name, [(n, Any, dataclasses.field(default=None)) for n in field_names])


def build_description(
    doc: Dict[str, Any],
    *,
    providers: Optional[Mapping[str, Any]] = None,
    builders: Optional[Mapping[str, Any]] = None,
    target: Optional[type] = None,
) -> DescriptionDocument:
    """
    Build a BeanDescription from a description document (already parsed
    YAML/JSON). Providers and builders may be referenced by registered name
    or as 'module:attr'. Without a target a record dataclass is generated.
    """
    validate_doc(doc)
    columns = normalize_columns(doc["fields"], providers or {}, builders or {})
    if target is None:
        if doc.get("target"):
            target = import_ref(doc["target"])
            if not isinstance(target, type):
                raise ConfigurationError(f"target '{doc['target']}' is not a class")
        else:
            target = _record_type(doc.get("name", "Record"), list(columns))
    return DescriptionDocument(
        version=str(doc.get("version", "1")),
        delimiter=doc.get("delimiter", ","),
        header=bool(doc.get("header", False)),
        description=describe_bean(target, columns),
    )


def load_description(path: Path, **kwargs: Any) -> DescriptionDocument:
    path = Path(path).expanduser()
    if not path.is_file():
        raise FileNotFoundError(path)
    try:
        doc = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{path}: invalid YAML") from e
    if not isinstance(doc, dict):
        raise ConfigurationError(f"{path}: bean description must be a mapping")
    return build_description(doc, **kwargs)
