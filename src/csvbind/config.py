from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from csvbind.builder.chain import VOCABULARY_COMPILE, VOCABULARY_PER_CALL, BuildEnv
from csvbind.builder.factory import DefaultBeanFactory
from csvbind.cellprocessor.base import Strictness
from csvbind.errors import ConfigurationError
from csvbind.messages.resolver import MessageBundle, MessageResolver

# ---------------------------------------------------------------------------
# Profiles (optional presets)
# ---------------------------------------------------------------------------

PROFILES: Dict[str, Dict[str, Any]] = {
    "default": {"strictness": "accumulate", "vocabulary_mode": VOCABULARY_COMPILE},
    "strict": {"strictness": "fail_fast", "vocabulary_mode": VOCABULARY_COMPILE},
    "refresh": {"strictness": "accumulate", "vocabulary_mode": VOCABULARY_PER_CALL},
}

VOCABULARY_MODES = {VOCABULARY_COMPILE, VOCABULARY_PER_CALL}


@dataclass
class BindConfig:
    """
    Settings shared by compilation and record processing.

    Fields:
      strictness:      accumulate | fail_fast
      vocabulary_mode: compile (providers called once) | per_call
      locale:          message locale, e.g. "ja" or "en_US"
      messages_dir:    directory holding messages*.yaml bundles
      log_level:       level for the "csvbind" logger
    """

    strictness: Strictness = Strictness.ACCUMULATE
    vocabulary_mode: str = VOCABULARY_COMPILE
    locale: Optional[str] = None
    messages_dir: Optional[Path] = None
    log_level: str = "INFO"
    bean_factory: Any = field(default_factory=DefaultBeanFactory, repr=False)

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("csvbind"), repr=False)

    def __post_init__(self):
        try:
            self.strictness = Strictness.parse(self.strictness)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        if self.vocabulary_mode not in VOCABULARY_MODES:
            raise ConfigurationError(
                f"Invalid vocabulary_mode '{self.vocabulary_mode}'. Expected one of {sorted(VOCABULARY_MODES)}."
            )
        if self.messages_dir is not None:
            self.messages_dir = Path(self.messages_dir).expanduser().resolve()

        # Logger formatting
        if not self.logger.handlers:
            h = logging.StreamHandler()
            h.setFormatter(logging.Formatter("[csvbind] %(message)s"))
            self.logger.addHandler(h)
        self.logger.setLevel(str(self.log_level).upper())

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_config(cls, cfg: Dict[str, Any] | None) -> "BindConfig":
        """
        Build from a config mapping:

        profile: strict
        strictness: accumulate
        vocabulary_mode: per_call
        locale: ja
        messages_dir: ./messages
        log_level: DEBUG

        Explicit keys override the profile.
        """
        if cfg is None:
            return cls()

        cfg = dict(cfg)
        profile_name = cfg.pop("profile", None)
        merged: Dict[str, Any] = {}
        if profile_name is not None:
            if profile_name not in PROFILES:
                raise ConfigurationError(f"Unknown profile '{profile_name}'. Expected one of {sorted(PROFILES)}.")
            merged.update(PROFILES[profile_name])

        known = {"strictness", "vocabulary_mode", "locale", "messages_dir", "log_level"}
        unknown = set(cfg) - known
        if unknown:
            raise ConfigurationError(f"Unknown config key(s): {sorted(unknown)}")
        merged.update(cfg)
        return cls(**merged)

    # ------------------------------------------------------------------
    # Derived objects
    # ------------------------------------------------------------------
    def message_resolver(self) -> MessageResolver:
        bundle = MessageBundle.from_directory(self.messages_dir) if self.messages_dir else MessageBundle()
        return MessageResolver(bundle, locale=self.locale)

    def build_env(self) -> BuildEnv:
        return BuildEnv(
            messages=self.message_resolver(),
            strictness=self.strictness,
            bean_factory=self.bean_factory,
            vocabulary_mode=self.vocabulary_mode,
        )

    def summary(self) -> Dict[str, Any]:
        return {
            "strictness": self.strictness.value,
            "vocabulary_mode": self.vocabulary_mode,
            "locale": self.locale,
            "messages_dir": str(self.messages_dir) if self.messages_dir else None,
            "log_level": self.log_level,
        }


def load_config(path: Path) -> BindConfig:
    path = Path(path).expanduser()
    if not path.is_file():
        raise FileNotFoundError(path)
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is not None and not isinstance(data, dict):
        raise ConfigurationError(f"{path}: config must be a mapping")
    # messages_dir is relative to the config file
    if data and data.get("messages_dir"):
        md = Path(data["messages_dir"]).expanduser()
        data["messages_dir"] = md if md.is_absolute() else path.parent / md
    return BindConfig.from_config(data)
