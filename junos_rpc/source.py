"""Configuration sources for ``Session.load_config``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LocalFile:
    """Configuration file on the local machine, sent inline."""

    path: str

    def read(self) -> str:
        # 存在しないファイルは FileNotFoundError のまま上げる
        return Path(self.path).expanduser().read_text()


@dataclass(frozen=True)
class RemoteURL:
    """ftp:// or http:// location the device fetches itself."""

    url: str


@dataclass(frozen=True)
class Literal:
    """Configuration statements given directly, one per line."""

    lines: tuple[str, ...]

    def __init__(self, lines):
        if isinstance(lines, str):
            lines = (lines,)
        object.__setattr__(self, "lines", tuple(lines))

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def as_source(source):
    """Normalize ``source`` to LocalFile, RemoteURL or Literal.

    A plain ``str`` or a list/tuple of ``str`` is taken as Literal
    statements, never as a path.
    """
    if isinstance(source, (LocalFile, RemoteURL, Literal)):
        return source
    if isinstance(source, str):
        return Literal(source)
    if isinstance(source, (list, tuple)) and all(isinstance(s, str) for s in source):
        return Literal(source)
    raise TypeError(f"unsupported configuration source: {type(source).__name__}")
