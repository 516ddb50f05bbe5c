"""Optional chunk enrichment with embeddings from the Hugging Face Inference API."""
import time
import logging
from typing import List
import httpx
from config import HUGGINGFACE_API_KEY, EMBEDDING_MODEL

logger = logging.getLogger(__name__)


class EmbeddingModel:
    """
    Wrapper for a Hugging Face feature-extraction model.

    Ingestion uses it on a best-effort basis: callers treat any error as
    "no embedding" and keep the chunk. Each call is a single request with
    no retries, so a cold or unreachable model never stalls an upload.
    """

    def __init__(
        self,
        api_key: str = HUGGINGFACE_API_KEY,
        model_name: str = EMBEDDING_MODEL,
        timeout: float = 30.0
    ):
        """
        Initialize the embedding model client.

        Args:
            api_key: Hugging Face API key
            model_name: Model identifier (default: sentence-transformers/all-mpnet-base-v2)
            timeout: Request timeout in seconds

        Raises:
            ValueError: If no API key is configured
        """
        if not api_key:
            raise ValueError("HUGGINGFACE_API_KEY environment variable is required")

        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout
        self.api_url = f"https://api-inference.huggingface.co/models/{model_name}"

        logger.info(f"Initialized EmbeddingModel with model: {model_name}")

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for multiple texts in a single API call.

        Args:
            texts: Texts to embed, one embedding is returned per text in order

        Raises:
            ValueError: If the list is empty or contains empty strings
            RuntimeError: If the API request fails
        """
        if not texts:
            raise ValueError("Texts list cannot be empty")

        if any(not text or not text.strip() for text in texts):
            raise ValueError("Texts in batch cannot be empty")

        embeddings = self._request_embeddings(texts)
        if len(embeddings) != len(texts):
            raise RuntimeError(
                f"Embedding count mismatch: expected {len(texts)}, got {len(embeddings)}"
            )
        return embeddings

    def _request_embeddings(self, texts: List[str]) -> List[List[float]]:
        """
        Call the HF API once.

        Raises:
            RuntimeError: On any non-200 status, timeout or network error
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        payload = {
            "inputs": texts,
            "options": {
                "wait_for_model": False
            }
        }

        try:
            start_time = time.time()

            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.api_url, headers=headers, json=payload)

            elapsed = time.time() - start_time
        except httpx.TimeoutException as e:
            raise RuntimeError(f"Request timeout after {self.timeout}s") from e
        except httpx.RequestError as e:
            raise RuntimeError(f"Network error: {str(e)}") from e

        # Model still loading on the HF side
        if response.status_code == 503:
            raise RuntimeError("Embedding model is loading; skipping enrichment")

        if response.status_code == 429:
            raise RuntimeError("Rate limit exceeded for Hugging Face API")

        if response.status_code == 401:
            raise RuntimeError("Invalid Hugging Face API key")

        if response.status_code != 200:
            raise RuntimeError(
                f"API request failed with status {response.status_code}: {response.text}"
            )

        logger.debug(f"Generated embeddings for {len(texts)} texts in {elapsed:.2f}s")
        return response.json()
