from __future__ import annotations

from typing import Optional


class CsvBindError(Exception):
    """Base class for every error raised by csvbind."""


class ConfigurationError(CsvBindError):
    """
    Structural problem found while describing or compiling a bean:
    duplicate column numbers, unknown declaration kinds, unresolvable
    builders/providers, malformed attributes.

    Always raised before any record is processed.
    """


class ProviderResolutionError(CsvBindError):
    """A vocabulary provider (or the factory creating it) failed."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class BeanCreationError(CsvBindError):
    """Instantiating a target type failed. Fatal for the current record."""

    def __init__(self, type_name: str, cause: Optional[BaseException] = None):
        super().__init__(f"fail create bean instance of '{type_name}'")
        self.type_name = type_name
        self.cause = cause


class LifecycleHookError(CsvBindError):
    """A post-read / pre-write hook raised. Fatal for the current record."""

    def __init__(self, type_name: str, hook: str, cause: Optional[BaseException] = None):
        super().__init__(f"lifecycle hook '{type_name}.{hook}' failed: {cause}")
        self.type_name = type_name
        self.hook = hook
        self.cause = cause
