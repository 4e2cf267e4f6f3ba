"""
Configuration Management for Catalog RAG

Loads configuration from ~/.catalog-rag/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field, replace

logger = logging.getLogger("catalog_rag.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".catalog-rag"
CONFIG_PATH = CONFIG_DIR / "config.json"
LOGS_DIR = CONFIG_DIR / "logs"


@dataclass(frozen=True)
class RetrievalConfig:
    """Retrieval cascade configuration (immutable, safe to share across queries)"""
    max_results: int = 10
    min_term_length: int = 2
    max_terms: int = 10
    context_window_size: int = 4000  # character budget, not tokens
    enable_semantic_search: bool = False  # reserved, no effect on retrieval
    search_timeout: float = 10.0  # seconds per catalog call

    def __post_init__(self):
        for name in ("max_results", "min_term_length", "max_terms", "context_window_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.search_timeout <= 0:
            raise ValueError(f"search_timeout must be positive, got {self.search_timeout!r}")


@dataclass
class BackendConfig:
    """Catalog backend (Supabase / PostgREST) configuration"""
    url: str = ""
    api_key: str = ""
    table: str = "products"
    search_column: str = "fts"
    text_search_config: str = ""  # e.g. "english"; empty uses the column default


@dataclass
class LLMConfig:
    """LLM provider configuration for the chat assistant"""
    provider: str = "google"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    google_api_key: str = ""
    google_model: str = "gemini-1.5-flash-latest"

    @property
    def model(self) -> str:
        """Model name for the selected provider"""
        return {
            "anthropic": self.anthropic_model,
            "openai": self.openai_model,
            "google": self.google_model,
        }.get(self.provider, "")


@dataclass
class CatalogRagConfig:
    """Main Catalog RAG configuration"""
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)


def _parse_retrieval_config(data: dict) -> RetrievalConfig:
    """Parse retrieval section from config dict"""
    retrieval_data = data.get("retrieval", {})
    return RetrievalConfig(
        max_results=retrieval_data.get("max_results", 10),
        min_term_length=retrieval_data.get("min_term_length", 2),
        max_terms=retrieval_data.get("max_terms", 10),
        context_window_size=retrieval_data.get("context_window_size", 4000),
        enable_semantic_search=retrieval_data.get("enable_semantic_search", False),
        search_timeout=retrieval_data.get("search_timeout", 10.0),
    )


def _parse_backend_config(data: dict) -> BackendConfig:
    """Parse backend section from config dict"""
    backend_data = data.get("backend", {})
    return BackendConfig(
        url=backend_data.get("url", ""),
        api_key=backend_data.get("api_key", ""),
        table=backend_data.get("table", "products"),
        search_column=backend_data.get("search_column", "fts"),
        text_search_config=backend_data.get("text_search_config", ""),
    )


def _parse_llm_config(data: dict) -> LLMConfig:
    """Parse llm section from config dict"""
    llm_data = data.get("llm", {})
    return LLMConfig(
        provider=llm_data.get("provider", "google"),
        anthropic_api_key=llm_data.get("anthropic_api_key", ""),
        anthropic_model=llm_data.get("anthropic_model", "claude-sonnet-4-20250514"),
        openai_api_key=llm_data.get("openai_api_key", ""),
        openai_model=llm_data.get("openai_model", "gpt-4o-mini"),
        google_api_key=llm_data.get("google_api_key", ""),
        google_model=llm_data.get("google_model", "gemini-1.5-flash-latest"),
    )


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _apply_retrieval_env(retrieval: RetrievalConfig) -> RetrievalConfig:
    """Return a copy of the retrieval config with environment overrides applied"""
    overrides = {}
    _env_int_map = {
        "CATALOG_RAG_MAX_RESULTS": "max_results",
        "CATALOG_RAG_MIN_TERM_LENGTH": "min_term_length",
        "CATALOG_RAG_MAX_TERMS": "max_terms",
        "CATALOG_RAG_CONTEXT_WINDOW": "context_window_size",
    }
    for env_var, attr in _env_int_map.items():
        val = os.getenv(env_var)
        if val:
            overrides[attr] = int(val)

    if os.getenv("CATALOG_RAG_SEARCH_TIMEOUT"):
        overrides["search_timeout"] = float(os.getenv("CATALOG_RAG_SEARCH_TIMEOUT"))
    if os.getenv("CATALOG_RAG_SEMANTIC_SEARCH"):
        overrides["enable_semantic_search"] = _env_flag(os.getenv("CATALOG_RAG_SEMANTIC_SEARCH"))

    if not overrides:
        return retrieval
    return replace(retrieval, **overrides)


def load_config() -> CatalogRagConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.catalog-rag/config.json)
    3. Default values
    """
    config = CatalogRagConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.retrieval = _parse_retrieval_config(data)
            config.backend = _parse_backend_config(data)
            config.llm = _parse_llm_config(data)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    config.retrieval = _apply_retrieval_env(config.retrieval)

    # Backend env var overrides
    if os.getenv("SUPABASE_URL"):
        config.backend.url = os.getenv("SUPABASE_URL")
    supabase_key = os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY")
    if supabase_key:
        config.backend.api_key = supabase_key
    if os.getenv("CATALOG_RAG_TABLE"):
        config.backend.table = os.getenv("CATALOG_RAG_TABLE")

    # LLM env var overrides
    _env_llm_map = {
        "ANTHROPIC_API_KEY": "anthropic_api_key",
        "ANTHROPIC_MODEL": "anthropic_model",
        "OPENAI_API_KEY": "openai_api_key",
        "OPENAI_MODEL": "openai_model",
        "GOOGLE_API_KEY": "google_api_key",
        "GEMINI_API_KEY": "google_api_key",
        "GOOGLE_MODEL": "google_model",
        "CATALOG_RAG_LLM_PROVIDER": "provider",
    }
    for env_var, attr in _env_llm_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.llm, attr, val)

    return config


def ensure_directories() -> None:
    """Ensure required directories exist"""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
