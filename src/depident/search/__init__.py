"""Text normalization for the product identifier index.

Provides:
- Token streams and tokenizers
- AlphaNumericFilter and TokenPairConcatenatingFilter
- Field and search analyzer chains
"""

from .analyzers import FieldAnalyzer, SearchFieldAnalyzer, build_search_terms, collect_terms
from .filters import AlphaNumericFilter, LowerCaseFilter, StopFilter, TokenPairConcatenatingFilter
from .tokens import KeywordTokenizer, ListTokenStream, Token, TokenFilter, TokenStream, WhitespaceTokenizer

__all__ = [
    "FieldAnalyzer",
    "SearchFieldAnalyzer",
    "build_search_terms",
    "collect_terms",
    "AlphaNumericFilter",
    "LowerCaseFilter",
    "StopFilter",
    "TokenPairConcatenatingFilter",
    "KeywordTokenizer",
    "ListTokenStream",
    "Token",
    "TokenFilter",
    "TokenStream",
    "WhitespaceTokenizer",
]
