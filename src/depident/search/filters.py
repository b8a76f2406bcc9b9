"""Token filters that turn raw evidence text into search terms.

Provides:
- AlphaNumericFilter: Splits tokens on non-alphanumeric runs, keeping positions intact
- TokenPairConcatenatingFilter: Adds the concatenation of every adjacent token pair
- LowerCaseFilter: Lower-cases every term
- StopFilter: Drops stop words, keeping positions intact
"""

import re
from typing import Iterator

from .tokens import Token, TokenFilter, TokenStream

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]+")

ENGLISH_STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "but", "by", "for", "if",
    "in", "into", "is", "it", "no", "not", "of", "on", "or", "such",
    "that", "the", "their", "then", "there", "these", "they", "this",
    "to", "was", "will", "with",
})


class AlphaNumericFilter(TokenFilter):
    """Replaces each token with its alphanumeric fragments.

    "bob-cat" becomes "bob" and "cat". A token with no alphanumeric
    characters is dropped and its position increment is carried onto the
    next emitted token, or onto end_increment if no token follows.
    Fragments after the first one of a token advance the position by one.

    Example:
        >>> AlphaNumericFilter(WhitespaceTokenizer("bob #$% cat")).terms()
        ['bob', 'cat']
    """

    def tokens(self) -> Iterator[Token]:
        skipped = 0
        for token in self.input_tokens():
            parts = [part for part in _NON_ALPHANUMERIC.split(token.term) if part]
            if not parts:
                skipped += token.position_increment
                continue
            for index, part in enumerate(parts):
                increment = token.position_increment + skipped if index == 0 else 1
                yield Token(part, increment, token.start_offset, token.end_offset)
            skipped = 0
        self.end_increment = self.source.end_increment + skipped


class TokenPairConcatenatingFilter(TokenFilter):
    """Passes tokens through and adds every adjacent pair as one extra term.

    The pair term sits at the position of the first token of the pair
    (position increment 0) and is emitted right after it, so
    ["red", "blue", "green"] becomes
    ["red", "redblue", "blue", "bluegreen", "green"].
    """

    def tokens(self) -> Iterator[Token]:
        previous = None
        for token in self.input_tokens():
            if previous is not None:
                yield Token(
                    previous.term + token.term,
                    0,
                    previous.start_offset,
                    token.end_offset,
                )
            yield token
            previous = token
        self.end_increment = self.source.end_increment


class LowerCaseFilter(TokenFilter):
    def tokens(self) -> Iterator[Token]:
        for token in self.input_tokens():
            yield Token(token.term.lower(), token.position_increment, token.start_offset, token.end_offset)
        self.end_increment = self.source.end_increment


class StopFilter(TokenFilter):
    """Drops stop words; their position increments carry onto the next token."""

    def __init__(self, source: TokenStream, stop_words=ENGLISH_STOP_WORDS):
        super().__init__(source)
        self.stop_words = frozenset(stop_words)

    def tokens(self) -> Iterator[Token]:
        skipped = 0
        for token in self.input_tokens():
            if token.term in self.stop_words:
                skipped += token.position_increment
                continue
            if skipped:
                token = Token(
                    token.term,
                    token.position_increment + skipped,
                    token.start_offset,
                    token.end_offset,
                )
                skipped = 0
            yield token
        self.end_increment = self.source.end_increment + skipped
