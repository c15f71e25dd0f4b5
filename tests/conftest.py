"""Shared fixtures."""

from pathlib import Path

import pytest


class WordTokenizer:
    """Deterministic stand-in for a subword tokenizer: one token per word."""

    def encode(self, text):
        return text.split()


@pytest.fixture
def tokenizer():
    return WordTokenizer()


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    """Directory with two text files, one binary-ish file and a subdirectory."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "a.txt").write_text("hello\nworld\n")
    (root / "b.log").write_text("skip this\nkeep this\n")
    (root / "nested").mkdir()
    (root / "nested" / "inner.txt").write_text("should never be visited")
    return root
