"""Token stream primitives for building search terms.

A TokenStream is an iterable of Token objects. Iterating a stream resets
it and produces a fresh pass, so one stream (or filter chain) can be
reused across many documents. After a pass is exhausted, end_increment
holds the position increment that trails the last token; filters that
drop tokens add the skipped increments there so positional queries on
the concatenation of several fields stay correct.

Provides:
- Token: Term with position increment and character offsets
- TokenStream: Base class for tokenizers and filters
- TokenFilter: Base class for streams that transform another stream
- WhitespaceTokenizer: Splits text on whitespace
- KeywordTokenizer: Emits the whole text as one token
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator

_WHITESPACE = re.compile(r"\S+")


@dataclass(frozen=True)
class Token:
    """A single term in a token stream.

    Attributes:
        term: Term text
        position_increment: Distance from the previous token's position
        start_offset: Start character offset in the source text
        end_offset: End character offset in the source text
    """

    term: str
    position_increment: int = 1
    start_offset: int = 0
    end_offset: int = 0


class TokenStream(ABC):
    """Base class for re-entrant token streams."""

    def __init__(self):
        self.end_increment = 0

    def reset(self) -> None:
        self.end_increment = 0

    @abstractmethod
    def tokens(self) -> Iterator[Token]:
        """Yield tokens from the current position; callers reset first."""

    def __iter__(self) -> Iterator[Token]:
        self.reset()
        return self.tokens()

    def terms(self) -> list[str]:
        return [token.term for token in self]


class TokenFilter(TokenStream):
    """A stream that consumes another stream."""

    def __init__(self, source: TokenStream):
        super().__init__()
        self.source = source

    def reset(self) -> None:
        super().reset()
        self.source.reset()

    def input_tokens(self) -> Iterator[Token]:
        return self.source.tokens()


class WhitespaceTokenizer(TokenStream):
    """Splits text into tokens on runs of whitespace."""

    def __init__(self, text: str = ""):
        super().__init__()
        self.text = text

    def set_text(self, text: str) -> "WhitespaceTokenizer":
        self.text = text
        return self

    def tokens(self) -> Iterator[Token]:
        for match in _WHITESPACE.finditer(self.text):
            yield Token(match.group(0), 1, match.start(), match.end())


class KeywordTokenizer(TokenStream):
    """Emits the entire input as a single token (even when empty)."""

    def __init__(self, text: str = ""):
        super().__init__()
        self.text = text

    def set_text(self, text: str) -> "KeywordTokenizer":
        self.text = text
        return self

    def tokens(self) -> Iterator[Token]:
        yield Token(self.text, 1, 0, len(self.text))


class ListTokenStream(TokenStream):
    """Stream over a fixed list of terms or tokens."""

    def __init__(self, items=()):
        super().__init__()
        self.items = list(items)

    def tokens(self) -> Iterator[Token]:
        for item in self.items:
            yield item if isinstance(item, Token) else Token(item)
