"""Embedding model integration with Hugging Face Inference API."""
import time
import logging
from typing import List, Optional
import httpx
from config import HUGGINGFACE_API_KEY, EMBEDDING_MODEL

logger = logging.getLogger(__name__)

MAX_BACKOFF_SECONDS = 60.0


class EmbeddingModel:
    """Embeds chunk and query text through the Hugging Face feature-extraction endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = HUGGINGFACE_API_KEY,
        model_name: str = EMBEDDING_MODEL,
        max_retries: int = 5,
        initial_delay: float = 5.0,
        timeout: float = 120.0
    ):
        """
        Initialize the embedding model client.

        Args:
            api_key: Hugging Face API key
            model_name: Model identifier (default: sentence-transformers/all-mpnet-base-v2)
            max_retries: Attempts before giving up on 503s, timeouts and network errors
            initial_delay: First backoff delay in seconds, doubled per attempt
            timeout: Request timeout in seconds
        """
        if not api_key:
            raise ValueError("HUGGINGFACE_API_KEY environment variable is required")

        self.api_key = api_key
        self.model_name = model_name
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.timeout = timeout
        self.api_url = f"https://api-inference.huggingface.co/models/{model_name}"

        logger.info(f"Initialized EmbeddingModel with model: {model_name}")

    def embed_text(self, text: str) -> List[float]:
        """
        Embed a single query or chunk.

        Raises:
            ValueError: If text is empty
            RuntimeError: If the API request fails after all retries
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        return self._post([text])[0]

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Embed many chunks in one API call.

        Empty strings must be filtered by the caller so that embeddings stay
        aligned with their chunks.

        Raises:
            ValueError: If the list is empty or contains empty strings
            RuntimeError: If the API request fails after all retries
        """
        if not texts:
            raise ValueError("Texts list cannot be empty")

        if any(not t or not t.strip() for t in texts):
            raise ValueError("Texts list contains empty strings")

        return self._post(texts)

    def _post(self, texts: List[str]) -> List[List[float]]:
        """Call the inference API, backing off while the model wakes up."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "inputs": texts,
            "options": {"wait_for_model": True}
        }

        delay = self.initial_delay
        last_error = None

        for attempt in range(1, self.max_retries + 1):
            try:
                start_time = time.time()
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(self.api_url, headers=headers, json=payload)
                elapsed = time.time() - start_time
            except httpx.TimeoutException:
                last_error = f"Request timeout after {self.timeout}s"
            except httpx.RequestError as e:
                last_error = f"Network error: {str(e)}"
            else:
                if response.status_code == 503:
                    last_error = "Model is loading (503)"
                elif response.status_code == 429:
                    raise RuntimeError("Rate limit exceeded. Please try again later.")
                elif response.status_code == 401:
                    raise RuntimeError("Invalid API key")
                elif response.status_code != 200:
                    error_msg = f"API request failed with status {response.status_code}: {response.text}"
                    logger.error(error_msg)
                    raise RuntimeError(error_msg)
                else:
                    logger.debug(f"Embedded {len(texts)} texts in {elapsed:.2f}s (attempt {attempt})")
                    return response.json()

            logger.warning(f"{last_error} on attempt {attempt}/{self.max_retries}")
            if attempt < self.max_retries:
                time.sleep(delay)
                delay = min(delay * 2, MAX_BACKOFF_SECONDS)

        error_msg = f"Failed to generate embeddings after {self.max_retries} attempts. Last error: {last_error}"
        logger.error(error_msg)
        raise RuntimeError(error_msg)
