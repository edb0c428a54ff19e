"""ContextVar-based parse configuration for Tinta.

Every pipeline stage takes its configuration as an explicit argument. When a
caller passes ``None``, the stage falls back to the context default held in
a ContextVar, so frameworks can set options once per thread or task without
threading them through every call.

Thread Safety:
    ParseConfig is frozen. ContextVars give each thread and each asyncio task
    its own default, so no locks are needed.

Usage:
    from tinta.config import ParseConfig, parse_config_context

    with parse_config_context(ParseConfig(autolinks_enabled=True)):
        doc = tinta.parse(text)

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields
from typing import Any

DEFAULT_MAX_NESTING_DEPTH = 128

# Alternate spellings accepted by from_dict (e.g. from TOML front-matter)
_ALIASES: dict[str, str] = {
    "enable_tables": "tables_enabled",
    "enable_autolinks": "autolinks_enabled",
}


@dataclass(frozen=True, slots=True)
class ParseConfig:
    """Immutable parse configuration.

    Attributes:
        max_nesting_depth: Maximum number of open block quotes and list items;
            exceeding it raises ResourceLimitExceeded. Inline nesting beyond
            the same depth degrades to literal text.
        tables_enabled: Recognize GFM pipe tables
        autolinks_enabled: Turn bare ``http(s)://`` and ``www.`` URLs into links
        hard_break_on_newline: Treat every newline inside a paragraph as a
            hard break instead of requiring two trailing spaces

    """

    max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH
    tables_enabled: bool = True
    autolinks_enabled: bool = False
    hard_break_on_newline: bool = False

    def __post_init__(self) -> None:
        if self.max_nesting_depth < 1:
            raise ValueError(
                f"max_nesting_depth must be at least 1, got {self.max_nesting_depth}"
            )

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> ParseConfig:
        """Create a ParseConfig from a plain mapping.

        Unknown keys are ignored. ``enable_tables`` and ``enable_autolinks``
        are accepted as aliases of the corresponding ``*_enabled`` fields.

        Example:
            >>> ParseConfig.from_dict({"enable_tables": False, "theme": "x"}).tables_enabled
            False

        """
        valid_fields = {f.name for f in fields(cls)}
        filtered: dict[str, Any] = {}
        for key, value in config_dict.items():
            key = _ALIASES.get(key, key)
            if key in valid_fields:
                filtered[key] = value
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: ParseConfig = ParseConfig()

_parse_config: ContextVar[ParseConfig] = ContextVar(
    "tinta_parse_config",
    default=_DEFAULT_CONFIG,
)


def get_parse_config() -> ParseConfig:
    """Get the parse configuration active in this context."""
    return _parse_config.get()


def set_parse_config(config: ParseConfig) -> None:
    """Set the parse configuration for the current context."""
    _parse_config.set(config)


def reset_parse_config() -> None:
    """Restore the module default for the current context."""
    _parse_config.set(_DEFAULT_CONFIG)


@contextmanager
def parse_config_context(config: ParseConfig) -> Iterator[None]:
    """Temporarily install ``config`` as the context default.

    The previous value is restored even if the body raises.
    """
    token = _parse_config.set(config)
    try:
        yield
    finally:
        _parse_config.reset(token)


__all__ = [
    "DEFAULT_MAX_NESTING_DEPTH",
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
]
