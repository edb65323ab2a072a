from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

_WHERE = "[row {{ row_number }}, column {{ column_number }}] {{ label }}"

# kind -> built-in message template
DEFAULT_MESSAGES: Mapping[str, str] = MappingProxyType({
    "csvbind.constraint.WordForbid":
        _WHERE + ": '{{ validated_value }}' contains forbidden words: {{ words | join(', ') }}.",
    "csvbind.constraint.WordRequire":
        _WHERE + ": '{{ validated_value }}' does not contain required words: {{ words | join(', ') }}.",
    "csvbind.constraint.Required":
        _WHERE + ": a value is required.",
    "csvbind.constraint.LengthMax":
        _WHERE + ": '{{ validated_value }}' is {{ length }} characters long, at most {{ max }} allowed.",
})

GENERIC_MESSAGE = _WHERE + ": invalid value '{{ validated_value }}'."
