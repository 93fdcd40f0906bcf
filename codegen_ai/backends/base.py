"""Generation gateway interface.

A gateway turns prompt text into generated text. Implementations only have
to provide generate(), raising GatewayError subclasses on failure;
dispatch() wraps it into a GenerationOutcome for the interaction loop.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from types import TracebackType

from codegen_ai.events import GenerationFailure, GenerationOutcome, GenerationText
from codegen_ai.exceptions import GatewayError, GatewayTimeoutError
from codegen_ai.logging import get_logger

logger = get_logger(__name__)


class GenerationGateway(ABC):
    """Base class for generation backends.

    Usage:
        async with create_gateway("gemini", config) as gateway:
            outcome = await gateway.dispatch("Write a CRUD service", request_id=1)
    """

    name: str = "base"

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Generate text for a prompt.

        Raises:
            GatewayError: On network, authentication or response failures.
        """

    async def dispatch(
        self,
        prompt: str,
        *,
        request_id: int = 0,
        timeout: float | None = None,
    ) -> GenerationOutcome:
        """Run one generation request and wrap its result.

        Args:
            prompt: Prompt text.
            request_id: Identifier copied into the outcome.
            timeout: Seconds before giving up; None waits indefinitely.

        Returns:
            GenerationText on success, GenerationFailure for any GatewayError.
        """
        try:
            if timeout:
                try:
                    text = await asyncio.wait_for(self.generate(prompt), timeout)
                except asyncio.TimeoutError as e:
                    raise GatewayTimeoutError(timeout) from e
            else:
                text = await self.generate(prompt)
        except GatewayError as e:
            logger.error("%s generation #%d failed: %s", self.name, request_id, e)
            return GenerationFailure(request_id=request_id, reason=str(e))
        return GenerationText(request_id=request_id, text=text)

    async def aclose(self) -> None:
        """Release network resources."""

    async def __aenter__(self) -> GenerationGateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
