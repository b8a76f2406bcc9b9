"""Analyzer chains used to index and query product identifiers.

Provides:
- FieldAnalyzer: Chain used when indexing vendor/product names
- SearchFieldAnalyzer: Indexing chain plus adjacent-pair concatenation, used for queries
- collect_terms: Run an analyzer over a text and return its terms
- build_search_terms: Turn an EvidenceCollection into de-duplicated search terms
"""

from depident.core.evidence import EvidenceCollection

from .filters import AlphaNumericFilter, LowerCaseFilter, StopFilter, TokenPairConcatenatingFilter
from .tokens import TokenStream, WhitespaceTokenizer


class FieldAnalyzer:
    """whitespace -> alphanumeric split -> lower case -> stop words.

    The chain is built once and reused; each call to token_stream points
    the tokenizer at new text.
    """

    def __init__(self, stop_words=None):
        self.tokenizer = WhitespaceTokenizer()
        chain = LowerCaseFilter(AlphaNumericFilter(self.tokenizer))
        self.chain: TokenStream = StopFilter(chain) if stop_words is None else StopFilter(chain, stop_words)

    def token_stream(self, text: str) -> TokenStream:
        self.tokenizer.set_text(text)
        return self.chain


class SearchFieldAnalyzer(FieldAnalyzer):
    """FieldAnalyzer chain followed by TokenPairConcatenatingFilter.

    "Apache Tomcat" yields "apache", "apachetomcat", "tomcat" so a fused
    product name in the index matches a two word query.
    """

    def __init__(self, stop_words=None):
        super().__init__(stop_words)
        self.chain = TokenPairConcatenatingFilter(self.chain)


def collect_terms(analyzer: FieldAnalyzer, text: str) -> list[str]:
    return analyzer.token_stream(text).terms()


def build_search_terms(collection: EvidenceCollection, analyzer: FieldAnalyzer | None = None) -> list[str]:
    """Build search terms from evidence, highest confidence first.

    Weighting terms registered on the collection are placed ahead of
    evidence terms. Duplicates keep their first (highest ranked) slot.

    Args:
        collection: Vendor or product evidence of a dependency
        analyzer: Analyzer to use (default: SearchFieldAnalyzer)

    Returns:
        Ordered list of unique terms
    """
    analyzer = analyzer or SearchFieldAnalyzer()
    ordered = sorted(collection, key=lambda e: e.confidence.weight, reverse=True)
    terms: dict[str, None] = {}
    for text in [*collection.weightings, *(e.value for e in ordered)]:
        for term in collect_terms(analyzer, text):
            terms.setdefault(term, None)
    return list(terms)
