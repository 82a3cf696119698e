from .client import LLMClient, CompletionError
from .embedder import Embedder, EmbeddingError

__all__ = ["LLMClient", "CompletionError", "Embedder", "EmbeddingError"]
