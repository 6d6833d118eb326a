from typing import ClassVar

from bulkgen.config.settings import Settings
from bulkgen.generation.base import BaseGenerationClient
from bulkgen.generation.example_client_adapter import ExampleClientAdapter
from bulkgen.generation.generator import Generator
from bulkgen.generation.openai_client_adapter import OpenAIClientAdapter


class GeneratorFactory:
    """Creates the configured generation client."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    # Providers that accept requests without an API key.
    KEYLESS_PROVIDERS: ClassVar[frozenset[str]] = frozenset({"ollama"})

    @classmethod
    def create(cls, settings: Settings) -> BaseGenerationClient:
        """Create a generation client from application settings.

        Missing credentials do not raise here; the returned client reports
        ``is_configured() == False`` and job submission is rejected instead.
        """
        provider = settings.generation_provider.lower()
        if provider == "example":
            return Generator(
                client=ExampleClientAdapter(),
                model="example",
                temperature=0.0,
                system_prompt=settings.generation_system_prompt,
            )
        base_url = cls._resolve_base_url(provider, settings)
        api_key = cls._resolve_api_key(provider, settings)
        configured = bool(api_key) or provider in cls.KEYLESS_PROVIDERS
        if provider == "openai_compatible" and not base_url:
            configured = False
        client = OpenAIClientAdapter(
            # The SDK refuses to build a client without a key.
            api_key=api_key or "not-configured",
            timeout_seconds=settings.generation_timeout_seconds,
            base_url=base_url or None,
        )
        return Generator(
            client=client,
            model=cls._resolve_model_name(provider, settings),
            temperature=settings.generation_temperature,
            system_prompt=settings.generation_system_prompt,
            configured=configured,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            return (settings.generation_openai_compatible_base_url or "").strip()
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown generation provider '{provider}'. Choose from: {supported}"
        )

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.generation_openai_api_key,
            "openai_compatible": settings.generation_openai_compatible_api_key,
            "openrouter": settings.generation_openrouter_api_key,
            "groq": settings.generation_groq_api_key,
            "together": settings.generation_together_api_key,
            "deepseek": settings.generation_deepseek_api_key,
            "ollama": settings.generation_ollama_api_key,
        }
        return (key_map.get(provider) or "").strip()

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.generation_openai_model_name,
            "openai_compatible": settings.generation_openai_compatible_model_name,
            "openrouter": settings.generation_openrouter_model_name,
            "groq": settings.generation_groq_model_name,
            "together": settings.generation_together_model_name,
            "deepseek": settings.generation_deepseek_model_name,
            "ollama": settings.generation_ollama_model_name,
        }
        return key_map.get(provider, "") or ""
