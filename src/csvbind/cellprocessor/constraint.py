from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple

from csvbind.builder.providers import Vocabulary
from csvbind.cellprocessor.base import CellContext, Operation, Strictness, ValidationOperation
from csvbind.builder.types import ConstraintDescriptor


def _unique(words) -> List[str]:
    seen = set()
    out = []
    for w in words:
        if w not in seen:
            seen.add(w)
            out.append(w)
    return out


class WordForbid(ValidationOperation):
    """Violation when the value contains any forbidden word (substring match)."""

    def __init__(self, descriptor: ConstraintDescriptor, vocabulary: Vocabulary, messages: Any,
                 strictness: Strictness, next: Optional[Operation] = None):
        super().__init__(descriptor, messages, strictness, next)
        self.vocabulary = vocabulary

    def check(self, value: Any, ctx: CellContext) -> Optional[Mapping[str, Any]]:
        text = str(value)
        # matched words keep vocabulary order
        matched = _unique(w for w in self.vocabulary.words() if w and w in text)
        if not matched:
            return None
        return {"words": matched}

    def params(self) -> Tuple[Any, ...]:
        return super().params() + (self.vocabulary.signature(),)


class WordRequire(ValidationOperation):
    """Violation when the value is missing any of the required words."""

    def __init__(self, descriptor: ConstraintDescriptor, vocabulary: Vocabulary, messages: Any,
                 strictness: Strictness, next: Optional[Operation] = None):
        super().__init__(descriptor, messages, strictness, next)
        self.vocabulary = vocabulary

    def check(self, value: Any, ctx: CellContext) -> Optional[Mapping[str, Any]]:
        text = str(value)
        missing = _unique(w for w in self.vocabulary.words() if w and w not in text)
        if not missing:
            return None
        return {"words": missing}

    def params(self) -> Tuple[Any, ...]:
        return super().params() + (self.vocabulary.signature(),)


class Required(ValidationOperation):
    skip_empty = False

    def check(self, value: Any, ctx: CellContext) -> Optional[Mapping[str, Any]]:
        if value is None or value == "":
            return {}
        return None


class LengthMax(ValidationOperation):
    def __init__(self, descriptor: ConstraintDescriptor, max_length: int, messages: Any,
                 strictness: Strictness, next: Optional[Operation] = None):
        super().__init__(descriptor, messages, strictness, next)
        self.max_length = max_length

    def check(self, value: Any, ctx: CellContext) -> Optional[Mapping[str, Any]]:
        length = len(str(value))
        if length <= self.max_length:
            return None
        return {"length": length, "max": self.max_length}
