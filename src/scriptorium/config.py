"""ContextVar-based compiler configuration for scriptorium.

A CompilerConfig is an immutable set of output flags. It can be passed to a
Compiler directly, or set for the current context so that every Compiler
created without an explicit config picks it up at compile time.

Thread Safety:
    ContextVars are thread-local. Each thread has independent
    storage, so setting a config in one thread never affects another.

Usage:
    from scriptorium.config import CompilerConfig, compile_config_context

    with compile_config_context(CompilerConfig(word_wrap=True, multi_level=True)):
        xml = Compiler().compile("upp~haf")

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CompilerConfig:
    """Immutable compiler configuration.

    Attributes:
        word_wrap: Run the WordTokenizer and wrap content in <w>/<pc>
        auto_line_numbers: Number unlabelled line breaks from a running counter
        multi_level: Emit MENOTA facsimile/diplomatic/normalized levels
        wrap_pages: Wrap each page's content in <p> after its <pb/>

    """

    word_wrap: bool = False
    auto_line_numbers: bool = False
    multi_level: bool = False
    wrap_pages: bool = False

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> CompilerConfig:
        """Create a CompilerConfig from a dictionary.

        Unknown keys are ignored, so application settings objects can be
        passed through without filtering.

        Example:
            >>> CompilerConfig.from_dict({"multi_level": True, "theme": "dark"})
            CompilerConfig(word_wrap=False, auto_line_numbers=False, multi_level=True, wrap_pages=False)

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


_DEFAULT_CONFIG: CompilerConfig = CompilerConfig()

_compile_config: ContextVar[CompilerConfig] = ContextVar(
    "compile_config",
    default=_DEFAULT_CONFIG,
)


def get_compile_config() -> CompilerConfig:
    """Get the compiler configuration active in this context."""
    return _compile_config.get()


def set_compile_config(config: CompilerConfig) -> None:
    """Set the compiler configuration for the current context.

    Thread Safety:
        Only affects the current thread's context.

    """
    _compile_config.set(config)


def reset_compile_config() -> None:
    """Reset the current context to the default configuration."""
    _compile_config.set(_DEFAULT_CONFIG)


@contextmanager
def compile_config_context(config: CompilerConfig) -> Iterator[None]:
    """Temporarily install a configuration, restoring the previous one on exit.

    The previous config is restored even if the body raises.
    """
    previous = _compile_config.get()
    _compile_config.set(config)
    try:
        yield
    finally:
        _compile_config.set(previous)


__all__ = [
    "CompilerConfig",
    "compile_config_context",
    "get_compile_config",
    "reset_compile_config",
    "set_compile_config",
]
