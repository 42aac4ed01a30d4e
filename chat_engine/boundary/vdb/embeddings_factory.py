"""
Embeddings factory for selecting the query embedding provider.

Depends on EMBEDDING_PROVIDER. Provider packages are imported lazily so a
deployment only needs the one it uses.

Dependencies: python-dotenv, langchain_google_genai | langchain_openai, chat_engine.configs
System role: Embedding client instantiation and selection
"""

import logging

from dotenv import load_dotenv
from langchain_core.embeddings import Embeddings

from chat_engine.configs.embeddings import EmbeddingSettings

# Provider SDKs read GOOGLE_API_KEY / OPENAI_API_KEY from the process environment
load_dotenv()

logger = logging.getLogger(__name__)


def get_embeddings(settings: EmbeddingSettings) -> Embeddings:
    """
    Build the LangChain embeddings client for the configured provider.

    Args:
        settings: Embedding settings

    Returns:
        Embeddings: Google (fixed dimension) or OpenAI embeddings client

    Raises:
        ValueError: If the provider is unknown
    """
    provider = settings.provider.lower()

    if provider == "google":
        from chat_engine.boundary.vdb.embeddings_wrapper import GeminiCorpusEmbeddings

        logger.info(f"{__name__}:get_embeddings - Creating Google embeddings model={settings.model}")
        kwargs = {}
        if settings.api_key:
            kwargs["google_api_key"] = settings.api_key
        return GeminiCorpusEmbeddings(
            model=settings.model,
            dimensions=settings.dimensions,
            **kwargs,
        )

    if provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        logger.info(f"{__name__}:get_embeddings - Creating OpenAI embeddings model={settings.model}")
        kwargs = {}
        if settings.api_key:
            kwargs["api_key"] = settings.api_key
        return OpenAIEmbeddings(
            model=settings.model,
            dimensions=settings.dimensions,
            timeout=settings.timeout,
            **kwargs,
        )

    raise ValueError(
        f"Invalid EMBEDDING_PROVIDER: {settings.provider}. Must be 'google' or 'openai'."
    )
