"""
Retrieval Analytics

Small structured summary of a retrieval outcome, for logs and response
metadata.
"""

from typing import Any, Dict
from dataclasses import dataclass

from .searcher import RetrievalResult


@dataclass(frozen=True)
class RetrievalAnalytics:
    """Monitoring summary of one retrieval"""
    product_count: int
    strategy: str
    search_term_count: int
    has_results: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_count": self.product_count,
            "strategy": self.strategy,
            "search_term_count": self.search_term_count,
            "has_results": self.has_results,
        }


def get_retrieval_analytics(result: RetrievalResult) -> RetrievalAnalytics:
    """Summarize a retrieval result (pure, no side effects)"""
    product_count = len(result.products)
    return RetrievalAnalytics(
        product_count=product_count,
        strategy=result.strategy.value,
        search_term_count=len(result.search_terms),
        has_results=product_count > 0,
    )
