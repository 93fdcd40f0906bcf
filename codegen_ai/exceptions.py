"""Exception hierarchy for codegen-ai.

Collaborators raise these errors; the interaction runtime converts them into
user-visible text. Only configuration and template-source errors are fatal,
and only at startup.
"""

from __future__ import annotations

from pathlib import Path


class CodegenError(Exception):
    """Base exception for all codegen-ai errors."""

    pass


class ConfigError(CodegenError):
    """Raised when configuration is missing or invalid."""

    pass


# =============================================================================
# Template / Prompt Sources
# =============================================================================


class TemplateSourceError(CodegenError):
    """Raised when the template directory cannot be listed."""

    def __init__(self, root: Path, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Cannot read templates from {root}: {reason}")


class PromptSourceError(CodegenError):
    """Base exception for prompt reading failures."""

    def __init__(self, template_name: str, message: str):
        self.template_name = template_name
        super().__init__(message)


class PromptNotFoundError(PromptSourceError):
    """Raised when a template has no prompt file."""

    def __init__(self, template_name: str, path: Path):
        self.path = path
        super().__init__(template_name, f"{path.name} does not exist in {path.parent}")


class PromptReadError(PromptSourceError):
    """Raised when a prompt file exists but cannot be read."""

    def __init__(self, template_name: str, path: Path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(template_name, f"Error reading {path.name}: {cause}")


# =============================================================================
# Generation Gateway
# =============================================================================


class GatewayError(CodegenError):
    """Base exception for generation gateway failures."""

    pass


class GatewayNetworkError(GatewayError):
    """Raised when the service cannot be reached."""

    pass


class GatewayHTTPError(GatewayError):
    """Raised when the service answers with an HTTP error status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)


class GatewayAuthError(GatewayHTTPError):
    """Raised on missing or rejected credentials."""

    pass


class GatewayTimeoutError(GatewayError):
    """Raised when a generation request exceeds the configured timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Generation timed out after {timeout:g}s")


class EmptyResponseError(GatewayError):
    """Raised when the service returns no usable content."""

    pass


class MalformedResponseError(GatewayError):
    """Raised when the service returns a structurally unexpected payload."""

    pass


class UnsupportedBackendError(CodegenError):
    """Raised by the backend factory for unknown backend identifiers."""

    def __init__(self, backend: str):
        self.backend = backend
        super().__init__(f"unsupported backend: {backend}")
