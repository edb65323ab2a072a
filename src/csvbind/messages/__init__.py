from .defaults import DEFAULT_MESSAGES, GENERIC_MESSAGE
from .resolver import EMPTY_MARKER, MessageBundle, MessageResolver

__all__ = [
    "DEFAULT_MESSAGES",
    "GENERIC_MESSAGE",
    "EMPTY_MARKER",
    "MessageBundle",
    "MessageResolver",
]
