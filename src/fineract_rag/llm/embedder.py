"""
Embedding Client

Embedding client for the OpenAI embeddings API (or any compatible
provider). It is responsible for:

- Batching of text inputs
- Network and transport error isolation
- Strict response validation, including a constant vector dimensionality

The class is stateless and safe to share between the indexer and
concurrent query handlers.
"""

from __future__ import annotations

from typing import List, Sequence, Optional
import logging
import httpx

from ..config import settings

logger = logging.getLogger("rag.embedder")


class EmbeddingError(RuntimeError):
    """Raised when embedding generation fails."""


class Embedder:
    """
    Asynchronous embedding generator.

    This class performs no caching; persisted embeddings live in the
    document store.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize an Embedder.

        Parameters
        ----------
        api_key : Optional[str]
            Optional override for the OpenAI API key. Defaults to settings.openai_api_key.

        model : Optional[str]
            Optional override for the embedding model. Defaults to settings.embedding_model.

        base_url : Optional[str]
            Base URL of the OpenAI-compatible API. Defaults to settings.openai_base_url.

        timeout : Optional[float]
            HTTP timeout for each request.
        """
        self.api_key = api_key or settings.openai_api_key.get_secret_value()
        self.model = model or settings.embedding_model
        self.url = (base_url or settings.openai_base_url).rstrip("/") + "/embeddings"
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(
        self,
        texts: Sequence[str],
        batch_size: int = 20,
    ) -> List[List[float]]:
        """
        Generate embeddings for a sequence of input texts.

        Parameters
        ----------
        texts : Sequence[str]
            List or sequence of input text strings.

        batch_size : int
            Maximum batch size per request. Helps avoid API token/size limits.

        Returns
        -------
        List[List[float]]
            One embedding per input text, in input order.

        Raises
        ------
        EmbeddingError
            If any batch fails or the response is malformed.
        """
        if not texts:
            return []

        all_embeddings: List[List[float]] = []
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            for start in range(0, len(texts), batch_size):
                batch = list(texts[start : start + batch_size])
                payload = {
                    "model": self.model,
                    "input": batch,
                }

                try:
                    response = await client.post(
                        self.url,
                        json=payload,
                        headers=headers,
                    )
                    response.raise_for_status()
                except httpx.HTTPError as exc:
                    logger.error(
                        "Embedding request failed (%s): batch size=%d, error=%s",
                        type(exc).__name__,
                        len(batch),
                        str(exc),
                    )
                    raise EmbeddingError(
                        f"Embedding generation failed: {type(exc).__name__}"
                    ) from exc

                try:
                    data = response.json()
                except ValueError as exc:
                    raise EmbeddingError("Embedding response was not valid JSON.") from exc

                embeddings = self._extract_embeddings(data)
                if len(embeddings) != len(batch):
                    raise EmbeddingError(
                        f"Expected {len(batch)} embeddings, received {len(embeddings)}."
                    )
                all_embeddings.extend(embeddings)

        return all_embeddings

    async def embed_one(self, text: str) -> List[float]:
        """Embed a single text. Used for queries and per-entity indexing."""
        embeddings = await self.embed([text])
        return embeddings[0]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_embeddings(data: dict) -> List[List[float]]:
        """
        Parse and validate embedding output format.

        OpenAI returns:
            { "data": [ {"index": 0, "embedding": [...]}, ... ] }

        Raises
        ------
        EmbeddingError
            If the API returns unexpected structure.
        """
        if "data" not in data:
            raise EmbeddingError("Embedding response missing 'data' field.")

        records = data["data"]
        if not isinstance(records, list):
            raise EmbeddingError("'data' field must be a list.")

        records = sorted(
            records,
            key=lambda r: r.get("index", 0) if isinstance(r, dict) else 0,
        )

        embeddings: List[List[float]] = []
        dim: Optional[int] = None

        for index, record in enumerate(records):
            if not isinstance(record, dict) or "embedding" not in record:
                raise EmbeddingError(
                    f"Malformed embedding record at index {index}: {record!r}"
                )

            emb = record["embedding"]
            if not isinstance(emb, list) or not emb or not all(
                isinstance(x, (float, int)) for x in emb
            ):
                raise EmbeddingError(
                    f"Invalid embedding vector at index {index}: must be a non-empty float list."
                )

            if dim is None:
                dim = len(emb)
            elif len(emb) != dim:
                raise EmbeddingError(
                    f"Inconsistent embedding dimensionality at index {index}."
                )

            embeddings.append([float(x) for x in emb])

        return embeddings
