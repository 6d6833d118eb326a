from abc import ABC, abstractmethod
from collections.abc import Mapping


class BaseGenerationClient(ABC):
    """Contract for the text-generation service used by the processing engine."""

    @abstractmethod
    def generate(self, prompt: str, config: Mapping[str, object]) -> str:
        """Generate text for one assembled prompt.

        Args:
            prompt: Prompt built from a file's name, content and agent config.
            config: Opaque agent configuration submitted with the job.

        Returns:
            Generated text.

        Raises:
            GenerationTimeoutError: if the provider did not answer in time.
            GenerationUpstreamError: on provider or network failure.
            GenerationError: on any other failure.
        """

    @abstractmethod
    def is_configured(self) -> bool:
        """Return True when an endpoint and credentials are available."""
