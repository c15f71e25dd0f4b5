"""
Subword tokenizers used by ``tokenize-dir``.
"""

from __future__ import annotations

from typing import Protocol, Sequence

import tiktoken

from .core import TokenizerError

DEFAULT_ENCODING = "p50k_base"


class Tokenizer(Protocol):
    def encode(self, text: str) -> Sequence[int]: ...


class TiktokenTokenizer:
    """Tokenizer backed by a named ``tiktoken`` encoding.

    Special-token text (``<|endoftext|>`` and friends) is encoded as tokens
    rather than rejected.
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING) -> None:
        try:
            self._encoding = tiktoken.get_encoding(encoding_name)
        except Exception as e:
            # tiktoken raises ValueError for unknown names and network or
            # cache errors when the vocabulary has to be fetched
            raise TokenizerError(
                f"Failed to load tokenizer encoding '{encoding_name}': {e}"
            ) from e
        self.encoding_name = encoding_name

    def encode(self, text: str) -> Sequence[int]:
        return self._encoding.encode(text, allowed_special="all")
