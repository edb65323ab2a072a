from __future__ import annotations

import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import yaml
from jinja2 import Environment, Undefined

from csvbind.messages.defaults import DEFAULT_MESSAGES, GENERIC_MESSAGE

EMPTY_MARKER = "<?>"

# "{csvbind.constraint.WordForbid.message}" -> property key lookup
KEY_PATTERN = re.compile(r"^\{([A-Za-z0-9_.\-]+)\}$")


class MarkerUndefined(Undefined):
    """Missing variables render as EMPTY_MARKER, also through filters such as join."""

    def __str__(self) -> str:
        return EMPTY_MARKER

    def __iter__(self):
        return iter((EMPTY_MARKER,))

    def __len__(self) -> int:
        return 1


_ENV = Environment(undefined=MarkerUndefined, autoescape=False, keep_trailing_newline=True)


def _locale_chain(locale: Optional[str]) -> List[str]:
    """ja_JP -> ["ja_JP", "ja", ""]"""
    chain: List[str] = []
    if locale:
        parts = locale.replace("-", "_").split("_")
        for i in range(len(parts), 0, -1):
            chain.append("_".join(parts[:i]))
    chain.append("")
    return chain


class MessageBundle:
    """
    Immutable key -> template lookup per locale.

    Loaded from YAML files <basename>.yaml (base) and <basename>_<locale>.yaml.
    Nested mappings are flattened with dots.
    """

    def __init__(self, tables: Optional[Mapping[str, Mapping[str, str]]] = None):
        self._tables = MappingProxyType({
            loc: MappingProxyType(dict(tbl)) for loc, tbl in (tables or {}).items()
        })

    @classmethod
    def from_directory(cls, directory: Path, basename: str = "messages") -> "MessageBundle":
        directory = Path(directory).expanduser()
        if not directory.is_dir():
            raise FileNotFoundError(f"message directory not found: {directory}")
        tables: Dict[str, Dict[str, str]] = {}
        for path in sorted(directory.glob(f"{basename}*.yaml")):
            stem = path.stem
            if stem == basename:
                locale = ""
            elif stem.startswith(basename + "_"):
                locale = stem[len(basename) + 1:]
            else:
                continue
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            if not isinstance(data, dict):
                raise ValueError(f"{path}: message file must contain a mapping")
            tables[locale] = _flatten(data)
        return cls(tables)

    @property
    def locales(self) -> List[str]:
        return sorted(self._tables)

    def get(self, key: str, locale: Optional[str] = None) -> Optional[str]:
        for loc in _locale_chain(locale):
            table = self._tables.get(loc)
            if table is not None and key in table:
                return table[key]
        return None


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    out: Dict[str, str] = {}
    for k, v in data.items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, Mapping):
            out.update(_flatten(v, key))
        else:
            out[key] = str(v)
    return out


class MessageResolver:
    """
    Resolves a message template against run-time variables.

    A template that is exactly "{some.key}" is looked up in the bundle for
    the active locale, then in the built-in defaults (by kind, then by key),
    then the generic message. Everything else is a Jinja2 template.
    """

    def __init__(
        self,
        bundle: Optional[MessageBundle] = None,
        locale: Optional[str] = None,
        defaults: Mapping[str, str] = DEFAULT_MESSAGES,
    ):
        self.bundle = bundle or MessageBundle()
        self.locale = locale
        self.defaults = defaults

    def template_for(self, template: Optional[str], kind: Optional[str] = None) -> str:
        if not template:
            return self.defaults.get(kind, GENERIC_MESSAGE) if kind else GENERIC_MESSAGE
        m = KEY_PATTERN.match(template)
        if m is None:
            return template
        key = m.group(1)
        found = self.bundle.get(key, self.locale)
        if found is not None:
            return found
        if kind and kind in self.defaults:
            return self.defaults[kind]
        # "{<kind>.message}" keys map back onto their kind
        if key.endswith(".message") and key[: -len(".message")] in self.defaults:
            return self.defaults[key[: -len(".message")]]
        return GENERIC_MESSAGE

    def resolve(self, template: Optional[str], variables: Mapping[str, Any], kind: Optional[str] = None) -> str:
        text = self.template_for(template, kind)
        return _ENV.from_string(text).render(**variables)
