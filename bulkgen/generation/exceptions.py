class GenerationError(Exception):
    """Raised when text generation fails."""


class GenerationTimeoutError(GenerationError):
    """Raised when the provider does not answer within the timeout."""


class GenerationUpstreamError(GenerationError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class GenerationNotConfiguredError(GenerationError):
    """Raised when no usable provider endpoint or credentials are configured."""
