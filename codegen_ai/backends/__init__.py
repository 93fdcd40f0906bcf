from codegen_ai.backends.base import GenerationGateway
from codegen_ai.backends.factory import BACKENDS, create_gateway
from codegen_ai.backends.gemini import GeminiGateway

__all__ = ["BACKENDS", "GeminiGateway", "GenerationGateway", "create_gateway"]
