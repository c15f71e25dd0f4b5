"""
Core logic for promptbuilder package.
"""

from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Callable,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    TextIO,
    Tuple,
)

import pathspec
from colorama import Fore, Style

if TYPE_CHECKING:
    from .tokenizer import Tokenizer

# Exceptions
class PromptBuilderError(Exception): ...
class InvalidRootError(PromptBuilderError): ...
class ConfigFileError(PromptBuilderError): ...
class OutputError(PromptBuilderError): ...
class TokenizerError(PromptBuilderError): ...

PLACEHOLDER_TEXT = "[Could not read contents]"

Renderer = Callable[[str, str], str]


# Diagnostics (never written to the primary output)
def _emit(msg: str, color: str = "") -> None:
    if color:
        msg = color + msg + Style.RESET_ALL
    print(msg, file=sys.stderr)


def info(msg: str) -> None:
    _emit(msg)


def warn(msg: str) -> None:
    _emit(msg, Fore.YELLOW)


def success(msg: str) -> None:
    _emit(msg, Fore.GREEN)


def error(msg: str) -> None:
    _emit(msg, Fore.RED)


# Ignore patterns
@dataclass(frozen=True)
class IgnorePattern:
    """A compiled base-name glob.

    ``spec`` is ``None`` when the source pattern failed to compile; such a
    pattern is still a valid matcher, it just never matches anything.
    """

    pattern: str
    spec: Optional[pathspec.PathSpec] = None

    def matches(self, name: str) -> bool:
        if self.spec is None:
            return False
        return self.spec.match_file(name)


def compile_ignore_pattern(pattern: str) -> IgnorePattern:
    try:
        spec = pathspec.PathSpec.from_lines("gitwildmatch", [pattern])
    except ValueError:
        warn(f"Warning: Invalid ignore pattern '{pattern}'. Ignoring.")
        return IgnorePattern(pattern)
    return IgnorePattern(pattern, spec)


def compile_ignore_patterns(patterns: Iterable[str]) -> List[IgnorePattern]:
    return [compile_ignore_pattern(p) for p in patterns]


def is_ignored(name: str, patterns: Sequence[IgnorePattern]) -> bool:
    return any(p.matches(name) for p in patterns)


def load_extra_patterns(config_path: Path) -> List[str]:
    """Read newline-separated ignore patterns from *config_path*.

    Blank lines and ``#`` comments are skipped.
    """
    if not config_path.exists():
        raise ConfigFileError(f"Config file '{config_path}' does not exist")
    if not config_path.is_file():
        raise ConfigFileError(f"'{config_path}' is not a file")
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            return [
                ln.strip()
                for ln in fh
                if ln.strip() and not ln.lstrip().startswith("#")
            ]
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read config file '{config_path}': {e}")


# Directory scanning
def validate_directory(path: Path) -> Path:
    if not path.exists():
        raise InvalidRootError(f"{path} does not exist.")
    if not path.is_dir():
        raise InvalidRootError(f"{path} is not a directory.")
    return path


def scan_entries(root: Path) -> Iterator[Tuple[str, Path]]:
    """Yield ``(name, path)`` for each regular file directly under *root*.

    Entries come back in whatever order the filesystem lists them.
    """
    try:
        for p in root.iterdir():
            if p.is_file():
                # names are lossily decoded to UTF-8, never surrogate-escaped
                yield os.fsencode(p.name).decode("utf-8", "replace"), p
    except OSError as e:
        raise InvalidRootError(f"Could not scan directory '{root}': {e}")


# Content
def load_contents(path: Path) -> str:
    """Return the UTF-8 text of *path*, or the placeholder (with a warning)."""
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError):
        warn(f"Warning: Could not read file {path}")
        return PLACEHOLDER_TEXT


def _split_lines(text: str) -> List[str]:
    # "\n" and "\r\n" end a line; a lone "\r" does not
    *terminated, last = text.split("\n")
    lines = [ln[:-1] if ln.endswith("\r") else ln for ln in terminated]
    if last:
        lines.append(last)
    return lines


def filter_lines(text: str, substrings: Sequence[str]) -> str:
    """Drop every line containing any of *substrings*.

    With no substrings the text is returned untouched; otherwise surviving
    lines are rejoined with ``\\n`` and no trailing newline.
    """
    if not substrings:
        return text
    kept = [
        ln for ln in _split_lines(text)
        if not any(s in ln for s in substrings)
    ]
    return "\n".join(kept)


# Renderers
def render_token_count(name: str, text: str, tokenizer: "Tokenizer") -> str:
    return f"{name}   {len(tokenizer.encode(text))} tokens\n"


def render_prompt(name: str, text: str) -> str:
    return f"{name}\n\n{text}\n"


# Output
@contextmanager
def open_sink(out_path: Optional[Path]) -> Iterator[TextIO]:
    """Yield the output stream: *out_path* if given, else standard output."""
    if out_path is None:
        yield sys.stdout
        return

    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_fh = out_path.open("w", encoding="utf-8", newline="\n")
    except OSError as e:
        raise OutputError(f"Failed to create output file '{out_path}': {e}")

    with out_fh:
        yield out_fh


@dataclass
class ScanSummary:
    written: int = 0
    ignored: int = 0


def process_directory(
    root: Path,
    render: Renderer,
    sink: TextIO,
    ignore_patterns: Sequence[IgnorePattern] = (),
    skip_substrings: Sequence[str] = (),
) -> ScanSummary:
    """Run name filter → load → line filter → render → write for each entry."""
    summary = ScanSummary()
    for name, path in scan_entries(root):
        if is_ignored(name, ignore_patterns):
            info(f"Skipping ignored file: {name}")
            summary.ignored += 1
            continue

        contents = load_contents(path)
        record = render(name, filter_lines(contents, skip_substrings))
        try:
            sink.write(record)
        except OSError as e:
            raise OutputError(f"Could not write output for '{name}': {e}")
        summary.written += 1

    return summary
