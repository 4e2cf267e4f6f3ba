"""
Query Processor

Normalizes user queries into lexical search terms, classifies intent and
extracts entity candidates. Purely rule-based: a fixed stop-word set and an
ordered table of substring intent rules.
"""

import re
from typing import List, Optional
from dataclasses import dataclass, field
from enum import Enum

from ..common.config import RetrievalConfig


class QueryIntent(str, Enum):
    """Types of query intent"""
    PRODUCT_SEARCH = "product_search"  # "heavy duty pump"
    COMPARISON = "comparison"  # "compare pump A vs pump B"
    AVAILABILITY = "availability"  # "is the valve in stock?"
    PRICING = "pricing"  # "how much does the pump cost?"
    GENERAL = "general"  # Catch-all


@dataclass
class ParsedQuery:
    """Parsed representation of a user query"""
    original: str
    cleaned: str
    intent: QueryIntent
    search_terms: List[str] = field(default_factory=list)
    entities: List[str] = field(default_factory=list)

    @property
    def has_terms(self) -> bool:
        return bool(self.search_terms)


# Anything other than word characters and whitespace becomes a separator
_PUNCTUATION_RE = re.compile(r"[^A-Za-z0-9_\s]")


class QueryProcessor:
    """
    Processes user queries for catalog search.

    Responsibilities:
    1. Clean and normalize query text
    2. Extract search terms (length filter, stop words, hard cap)
    3. Detect query intent
    4. Extract entity candidates
    """

    # Intent rules, checked in order; the first match wins
    INTENT_RULES = (
        (QueryIntent.COMPARISON, ("compare", "vs", "versus")),
        (QueryIntent.PRICING, ("price", "cost", "$")),
        (QueryIntent.AVAILABILITY, ("available", "stock", "in stock")),
    )

    # Stop words to filter from search terms
    STOP_WORDS = frozenset({
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did",
        "will", "would", "could", "should", "may", "might", "can",
        "what", "where", "when", "why", "how",
    })

    # Terms longer than this are treated as entity candidates
    ENTITY_MIN_LENGTH = 3

    def __init__(self, config: Optional[RetrievalConfig] = None):
        """Initialize query processor.

        Args:
            config: Retrieval configuration (term length and count limits)
        """
        self._config = config or RetrievalConfig()

    def parse(self, query: str) -> ParsedQuery:
        """
        Parse a user query into structured form.

        Args:
            query: Raw user query string

        Returns:
            ParsedQuery with search terms, intent, and entities

        Raises:
            TypeError: If query is not a string
        """
        if not isinstance(query, str):
            raise TypeError(f"query must be a string, got {type(query).__name__}")

        cleaned = self._clean_query(query)
        search_terms = self._extract_search_terms(cleaned)
        intent = self._detect_intent(cleaned, search_terms)
        entities = self._extract_entities(search_terms)

        return ParsedQuery(
            original=query,
            cleaned=cleaned,
            intent=intent,
            search_terms=search_terms,
            entities=entities,
        )

    def _clean_query(self, query: str) -> str:
        """Clean and normalize query text"""
        return query.lower().strip()

    def is_stop_word(self, word: str) -> bool:
        return word in self.STOP_WORDS

    def _extract_search_terms(self, cleaned: str) -> List[str]:
        """Tokenize and filter; keeps order and duplicates, cuts at max_terms"""
        tokens = _PUNCTUATION_RE.sub(" ", cleaned).split()

        terms = [
            t for t in tokens
            if len(t) >= self._config.min_term_length and not self.is_stop_word(t)
        ]

        # Hard truncation, not top-k by relevance
        return terms[:self._config.max_terms]

    def _detect_intent(self, cleaned: str, search_terms: List[str]) -> QueryIntent:
        """Detect the primary intent of the query"""
        for intent, markers in self.INTENT_RULES:
            if any(marker in cleaned for marker in markers):
                return intent

        if search_terms:
            return QueryIntent.PRODUCT_SEARCH
        return QueryIntent.GENERAL

    def _extract_entities(self, search_terms: List[str]) -> List[str]:
        """Extract potential product entities from search terms"""
        return [t for t in search_terms if len(t) > self.ENTITY_MIN_LENGTH]
