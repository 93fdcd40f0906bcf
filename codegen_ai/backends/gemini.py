"""Gemini generation backend.

Uses a pydantic-ai Agent over the Google provider. Library exceptions are
translated into the GatewayError hierarchy so callers never have to know
about pydantic-ai or httpx.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic_ai import Agent
from pydantic_ai.exceptions import AgentRunError, ModelHTTPError, UnexpectedModelBehavior
from pydantic_ai.models import Model

from codegen_ai.backends.base import GenerationGateway
from codegen_ai.backends.http import create_async_http_client
from codegen_ai.config import GeminiConfig
from codegen_ai.exceptions import (
    EmptyResponseError,
    GatewayAuthError,
    GatewayError,
    GatewayHTTPError,
    GatewayNetworkError,
    MalformedResponseError,
)
from codegen_ai.logging import get_logger

logger = get_logger(__name__)

AUTH_STATUS_CODES = {401, 403}
RATE_LIMIT_STATUS_CODE = 429


def extract_text(output: Any) -> str:
    """Validate agent output and return it as text.

    Raises:
        MalformedResponseError: If the output is not a string.
        EmptyResponseError: If the output has no content.
    """
    if not isinstance(output, str):
        raise MalformedResponseError(f"Unexpected response type: {type(output).__name__}")
    if not output.strip():
        raise EmptyResponseError("No response from API: empty candidates or parts")
    return output


def translate_http_error(error: ModelHTTPError) -> GatewayHTTPError:
    """Map an HTTP error status to a gateway error."""
    status = error.status_code
    if status in AUTH_STATUS_CODES:
        return GatewayAuthError(status, f"Authentication failed (HTTP {status}): check the Gemini API key")
    if status == RATE_LIMIT_STATUS_CODE:
        return GatewayHTTPError(status, f"Rate limited by Gemini (HTTP {status})")
    return GatewayHTTPError(status, f"Error generating content (HTTP {status}): {error.body or error.message}")


class GeminiGateway(GenerationGateway):
    """Generation gateway for Google Gemini models."""

    name = "gemini"

    def __init__(
        self,
        config: GeminiConfig,
        *,
        model: Model | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            config: API key and model name.
            model: Pre-built model, mainly for tests. Skips provider setup.
            http_client: HTTP client to use; created and owned by the gateway if None.
        """
        self._config = config
        self._model = model
        self._http_client = http_client
        self._owns_http_client = False
        self._agent: Agent[None, str] | None = None

    @property
    def model_name(self) -> str:
        """Configured model identifier."""
        return self._config.model_name

    def _build_model(self) -> Model:
        if self._model is not None:
            return self._model
        if not self._config.api_key:
            raise GatewayAuthError(401, "Gemini API key is not configured")

        from pydantic_ai.models.google import GoogleModel
        from pydantic_ai.providers.google import GoogleProvider

        if self._http_client is None:
            self._http_client = create_async_http_client()
            self._owns_http_client = True

        provider = GoogleProvider(api_key=self._config.api_key, http_client=self._http_client)
        logger.info("Created Gemini client for model %s", self._config.model_name)
        return GoogleModel(self._config.model_name, provider=provider)

    @property
    def agent(self) -> Agent[None, str]:
        """Agent used for generation, created on first use."""
        if self._agent is None:
            self._agent = Agent(self._build_model(), output_type=str)
        return self._agent

    async def generate(self, prompt: str) -> str:
        """Send the prompt to Gemini and return the generated text."""
        logger.info("Attempting API call to Gemini: model=%s prompt_length=%d", self.model_name, len(prompt))
        try:
            result = await self.agent.run(prompt)
        except ModelHTTPError as e:
            logger.error("Gemini returned HTTP %d", e.status_code)
            raise translate_http_error(e) from e
        except UnexpectedModelBehavior as e:
            logger.error("Unexpected Gemini response: %s", e)
            raise MalformedResponseError(f"Malformed response from API: {e.message}") from e
        except AgentRunError as e:
            logger.error("Gemini run failed: %s", e)
            raise GatewayError(f"Error generating content: {e}") from e
        except httpx.HTTPError as e:
            logger.error("Network error calling Gemini: %s", e)
            raise GatewayNetworkError(f"Network error: {e}") from e

        text = extract_text(result.output)
        logger.info("Successfully received response: length=%d", len(text))
        return text

    async def aclose(self) -> None:
        """Close the HTTP client if the gateway created it."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_http_client = False
