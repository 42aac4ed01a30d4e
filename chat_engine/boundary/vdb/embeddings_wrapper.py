"""
Gemini query embeddings at the corpus dimensionality.

GoogleGenerativeAIEmbeddings ignores output_dimensionality passed to its
constructor, so the dimension and retrieval task type are supplied on
every call instead.

Dependencies: langchain_core, langchain_google_genai
System role: Embedding dimension consistency with the content corpus
"""

import logging
from typing import List

from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings

logger = logging.getLogger(__name__)

QUERY_TASK_TYPE = "RETRIEVAL_QUERY"
DOCUMENT_TASK_TYPE = "RETRIEVAL_DOCUMENT"


class GeminiCorpusEmbeddings(Embeddings):
    """Embeddings adapter pinning Gemini output to the stored vector size."""

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        dimensions: int = 1536,
        client: GoogleGenerativeAIEmbeddings | None = None,
        **client_kwargs,
    ) -> None:
        """
        Args:
            model: Gemini embedding model ID (gemini-embedding-001 goes up to 3072 dims)
            dimensions: Length of the vectors stored on content items
            client: Prebuilt client, mainly for tests
            **client_kwargs: Passed to GoogleGenerativeAIEmbeddings (google_api_key, ...)
        """
        self.dimensions = dimensions
        self.client = client or GoogleGenerativeAIEmbeddings(model=model, **client_kwargs)
        logger.info(f"{__name__}:__init__ - model={model} dimensions={dimensions}")

    def embed_query(self, text: str) -> List[float]:
        return self.client.embed_query(
            text,
            task_type=QUERY_TASK_TYPE,
            output_dimensionality=self.dimensions,
        )

    async def aembed_query(self, text: str) -> List[float]:
        return await self.client.aembed_query(
            text,
            task_type=QUERY_TASK_TYPE,
            output_dimensionality=self.dimensions,
        )

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        # Only used when corpus rows are embedded offline
        return self.client.embed_documents(
            texts,
            task_type=DOCUMENT_TASK_TYPE,
            output_dimensionality=self.dimensions,
        )
