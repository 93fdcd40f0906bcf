"""Backend selection.

Maps a backend identifier to a gateway implementation. Adding a backend
means adding one entry to BACKENDS.
"""

from __future__ import annotations

from collections.abc import Callable

from codegen_ai.backends.base import GenerationGateway
from codegen_ai.backends.gemini import GeminiGateway
from codegen_ai.config import CodegenConfig
from codegen_ai.exceptions import UnsupportedBackendError

GatewayFactory = Callable[[CodegenConfig], GenerationGateway]

BACKENDS: dict[str, GatewayFactory] = {
    "gemini": lambda config: GeminiGateway(config.gemini),
}


def create_gateway(backend: str, config: CodegenConfig) -> GenerationGateway:
    """Create the gateway for a backend identifier.

    Args:
        backend: Backend name, case-insensitive (e.g. "gemini").
        config: Application configuration.

    Returns:
        A new, not yet connected gateway.

    Raises:
        UnsupportedBackendError: If the backend is unknown.
    """
    factory = BACKENDS.get(backend.strip().lower())
    if factory is None:
        raise UnsupportedBackendError(backend)
    return factory(config)
