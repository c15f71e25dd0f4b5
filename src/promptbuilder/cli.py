"""
CLI entrypoint for promptbuilder package.
"""
import argparse
import sys
from functools import partial
from pathlib import Path
from typing import List, Optional

from colorama import just_fix_windows_console

from . import __version__
from .core import (
    compile_ignore_patterns,
    load_extra_patterns,
    open_sink,
    process_directory,
    render_prompt,
    render_token_count,
    success,
    info,
    error,
    validate_directory,
    PromptBuilderError,
)
from .tokenizer import DEFAULT_ENCODING, TiktokenTokenizer


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("directory", type=Path, help="Path to the target directory")
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        metavar="FILE",
        help="Output file path. If not provided, outputs to stdout",
    )
    p.add_argument(
        "-i",
        "--ignore",
        action="append",
        default=[],
        metavar="GLOB",
        help="Ignore files matching the given glob pattern. Can be used multiple times",
    )
    p.add_argument(
        "-s",
        "--skip",
        action="append",
        default=[],
        metavar="SUBSTRING",
        help="Skip lines containing the given substring. Can be used multiple times",
    )
    p.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to a file with extra ignore patterns (one per line)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="prompt-builder",
        description="Processes files in a directory.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    tok = sub.add_parser(
        "tokenize-dir",
        aliases=["count-tokens"],
        help="Display the token count of each file in the directory",
    )
    _add_common_args(tok)
    tok.add_argument(
        "-e",
        "--encoding",
        default=DEFAULT_ENCODING,
        help=f"tiktoken encoding used for counting (default: {DEFAULT_ENCODING})",
    )
    tok.set_defaults(mode="tokens")

    prompt = sub.add_parser(
        "dir-prompt",
        aliases=["build-prompt"],
        help="Build a prompt from file names and their contents",
    )
    _add_common_args(prompt)
    prompt.set_defaults(mode="prompt")

    return p.parse_args(argv)


def run(ns: argparse.Namespace) -> None:
    root = validate_directory(ns.directory)

    patterns = list(ns.ignore)
    if ns.config:
        patterns.extend(load_extra_patterns(ns.config))
        if ns.verbose:
            info(f"[prompt-builder] Loaded extra patterns from {ns.config}")
    ignore = compile_ignore_patterns(patterns)

    with open_sink(ns.output) as sink:
        if ns.mode == "tokens":
            tokenizer = TiktokenTokenizer(ns.encoding)
            render = partial(render_token_count, tokenizer=tokenizer)
        else:
            render = render_prompt

        if ns.verbose:
            info(f"[prompt-builder] Scanning {root} …")

        summary = process_directory(
            root,
            render,
            sink,
            ignore_patterns=ignore,
            skip_substrings=ns.skip,
        )

    if ns.verbose:
        success(
            f"[prompt-builder] Done. {summary.written} files written, "
            f"{summary.ignored} ignored."
        )


def main(argv: Optional[List[str]] = None) -> None:
    just_fix_windows_console()
    ns = _parse_args(argv)
    try:
        run(ns)
    except PromptBuilderError as e:
        error(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        error("\nOperation cancelled by user.")
        sys.exit(1)
    except Exception as e:
        error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
