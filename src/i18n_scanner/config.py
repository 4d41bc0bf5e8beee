"""Configuration for the i18n scanner.

`ScanConfig` is the small, immutable option set the scanning core consumes.
`EnvConfig` loads one from environment variables (and a `.env` file) for the
command-line driver.
"""
import os
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from i18n_scanner.analyzer.errors import ConfigError

__version__ = "0.4.0"


class ScanMode(str, Enum):
    """Which visitor rules apply to a scan."""

    CONVENTION = "convention-aware"
    PLAIN = "plain"

    @classmethod
    def parse(cls, value: "str | ScanMode") -> "ScanMode":
        """Resolve a mode name, accepting the `rails` / `ruby` aliases.

        Raises:
            ConfigError: If the name is not a known mode
        """
        if isinstance(value, ScanMode):
            return value
        normalized = str(value).strip().lower()
        mode = _MODE_ALIASES.get(normalized)
        if mode is None:
            raise ConfigError.invalid_value("mode", value, f"expected one of {sorted(_MODE_ALIASES)}")
        return mode


_MODE_ALIASES = {
    "convention-aware": ScanMode.CONVENTION,
    "convention": ScanMode.CONVENTION,
    "rails": ScanMode.CONVENTION,
    "plain": ScanMode.PLAIN,
    "ruby": ScanMode.PLAIN,
}

DEFAULT_CALLBACK_MACROS = (
    "before_action",
    "after_action",
    "around_action",
    "prepend_before_action",
    "prepend_after_action",
    "prepend_around_action",
    "append_before_action",
    "append_after_action",
    "append_around_action",
)


@dataclass(frozen=True)
class ScanConfig:
    """Options recognized by the scanning core."""

    mode: ScanMode = ScanMode.CONVENTION
    # Directories whose files get controller scope conventions; empty = everywhere
    relative_roots: Tuple[str, ...] = ()
    translation_methods: Tuple[str, ...] = ("t", "translate")
    namespaced_translation_methods: Tuple[str, ...] = ("I18n.t", "I18n.translate")
    callback_macros: Tuple[str, ...] = DEFAULT_CALLBACK_MACROS
    attribute_helper_methods: Tuple[str, ...] = ("human_attribute_name",)
    model_name_method: str = "model_name"
    humanize_method: str = "human"
    magic_comment_marker: str = "i18n-tasks-use"
    controller_suffix: str = "Controller"
    # Drop interpolated keys instead of reporting them verbatim
    strict: bool = False

    def __post_init__(self):
        object.__setattr__(self, "mode", ScanMode.parse(self.mode))
        for name in ("relative_roots", "translation_methods", "namespaced_translation_methods",
                     "callback_macros", "attribute_helper_methods"):
            value = getattr(self, name)
            if isinstance(value, str):
                raise ConfigError.invalid_value(name, value, "expected a sequence of strings")
            object.__setattr__(self, name, tuple(value))

    def with_mode(self, mode: "str | ScanMode") -> "ScanConfig":
        return replace(self, mode=ScanMode.parse(mode))


class EnvConfig:
    """Configuration loader with environment variable support."""

    def __init__(self, env_file: Optional[Path] = None):
        """Initialize config by loading a .env file.

        Args:
            env_file: Explicit .env path; defaults to ./.env
        """
        load_dotenv(env_file or Path.cwd() / ".env")

    @property
    def mode(self) -> ScanMode:
        """Scan mode from I18N_SCAN_MODE, defaulting to convention-aware."""
        return ScanMode.parse(os.getenv("I18N_SCAN_MODE", ScanMode.CONVENTION.value))

    @property
    def relative_roots(self) -> Tuple[str, ...]:
        """Comma-separated I18N_SCAN_RELATIVE_ROOTS.

        Returns:
            Tuple of root directories (empty when unset)
        """
        raw = os.getenv("I18N_SCAN_RELATIVE_ROOTS", "")
        return tuple(part.strip() for part in raw.split(",") if part.strip())

    @property
    def magic_comment_marker(self) -> str:
        return os.getenv("I18N_SCAN_MAGIC_MARKER", "i18n-tasks-use")

    @property
    def strict(self) -> bool:
        return os.getenv("I18N_SCAN_STRICT", "").strip().lower() in ("1", "true", "yes", "on")

    @property
    def log_level(self) -> str:
        return os.getenv("I18N_SCAN_LOG_LEVEL", "WARNING")

    def to_scan_config(self, **overrides) -> ScanConfig:
        """Build a ScanConfig, letting explicit (non-None) overrides win."""
        values = {
            "mode": self.mode,
            "relative_roots": self.relative_roots,
            "magic_comment_marker": self.magic_comment_marker,
            "strict": self.strict,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return ScanConfig(**values)


# Singleton instance
_config = None


def get_config() -> EnvConfig:
    """Get or create singleton EnvConfig instance."""
    global _config
    if _config is None:
        _config = EnvConfig()
    return _config
