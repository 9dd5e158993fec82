# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from typing import Optional, Dict, Any
import httpx
import structlog
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from pipeguard.adapters.ai.base import NarrativeGenerator
from pipeguard.adapters.ai.prompts import SYSTEM_PROMPT
from pipeguard.core.config import Settings, get_settings
from pipeguard.exceptions import NarrativeGenerationError

logger = structlog.get_logger(__name__)

class HttpNarrativeGenerator(NarrativeGenerator):
    """
    Narrative generator backed by an OpenAI-compatible chat completions API.

    Transport errors are retried with exponential backoff; everything else
    surfaces as NarrativeGenerationError.
    """
    def __init__(
            self,
            api_key: Optional[str] = None,
            api_url: Optional[str] = None,
            model: Optional[str] = None,
            timeout: Optional[int] = None,
            settings: Optional[Settings] = None,
            client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: API key (defaults to settings)
            api_url: Chat completions URL (defaults to settings)
            model: Model identifier (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            settings: Application settings
            client: Preconfigured HTTP client
        """
        narrative = (settings or get_settings()).narrative

        self.api_key = api_key or narrative.api_key
        self.api_url = api_url or narrative.api_url
        self.model = model or narrative.model
        self.timeout = timeout or narrative.timeout
        self.temperature = narrative.temperature
        self.max_tokens = narrative.max_tokens

        if not self.api_key:
            raise ValueError("Narrative API key is required")

        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
        )

        logger.info(
            "narrative_client_initialized",
            api_url=self.api_url,
            model=self.model,
            timeout=self.timeout,
        )

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        logger.debug(
            "narrative_api_request",
            url=self.api_url,
            payload_size=len(str(payload)),
        )
        return await self.client.post(self.api_url, json=payload, headers=self._get_headers())

    async def generate(self, prompt: str) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Prompt text

        Returns:
            Generated text

        Raises:
            NarrativeGenerationError: If the request or response is unusable
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

        try:
            response = await self._post(payload)
        except httpx.TimeoutException:
            logger.error("narrative_api_timeout", url=self.api_url, timeout=self.timeout)
            raise NarrativeGenerationError(f"Request timed out after {self.timeout}s", status_code=504)
        except httpx.NetworkError as e:
            logger.error("narrative_api_network_error", url=self.api_url, error=str(e))
            raise NarrativeGenerationError(f"Network error: {e}", status_code=503)
        except httpx.HTTPError as e:
            logger.error("narrative_api_http_error", url=self.api_url, error=str(e))
            raise NarrativeGenerationError(f"HTTP error: {e}")

        if response.status_code >= 400:
            error_detail = self._extract_error_detail(response)
            logger.error(
                "narrative_api_error",
                url=self.api_url,
                status_code=response.status_code,
                error=error_detail,
            )
            raise NarrativeGenerationError(
                error_detail or f"API request failed with status {response.status_code}",
                status_code=response.status_code,
            )

        text = self.extract_text(response.json())

        logger.info(
            "narrative_generated",
            model=self.model,
            prompt_length=len(prompt),
            response_length=len(text),
        )
        return text

    def extract_text(self, response: Dict[str, Any]) -> str:
        """
        Extract text from a chat completion response.

        Args:
            response: Parsed response body

        Returns:
            Generated text
        """
        try:
            return response["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            logger.error("narrative_extract_text_failed", error=str(e))
            raise NarrativeGenerationError(f"Failed to extract text from the response: {e}")

    def _extract_error_detail(self, response: httpx.Response) -> str:
        try:
            error_json = response.json()
        except ValueError:
            return response.text

        if not isinstance(error_json, dict):
            return str(error_json)

        if "error" in error_json:
            if isinstance(error_json["error"], dict):
                return error_json["error"].get("message", str(error_json["error"]))
            return str(error_json["error"])

        if "detail" in error_json:
            return str(error_json["detail"])

        if "message" in error_json:
            return str(error_json["message"])

        return str(error_json)

    async def close(self):
        """ Close the HTTP client """
        await self.client.aclose()
        logger.debug("narrative_client_closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
