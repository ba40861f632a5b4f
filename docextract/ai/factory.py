from typing import ClassVar

from docextract.ai.analyzer import DocumentAnalyzer
from docextract.ai.client_base import BaseCompletionClient
from docextract.ai.example_client_adapter import ExampleClientAdapter
from docextract.ai.openai_client_adapter import OpenAIClientAdapter
from docextract.config.settings import Settings


class CompletionClientFactory:
    """Creates the configured completion client and the analyzer that uses it."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "lovable": "https://ai.gateway.lovable.dev/v1",
        "openrouter": "https://openrouter.ai/api/v1",
    }

    @classmethod
    def requires_api_key(cls, settings: Settings) -> bool:
        return settings.ai_provider.lower() != "example"

    @classmethod
    def create_client(cls, settings: Settings) -> BaseCompletionClient:
        provider = settings.ai_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=settings.ai_api_key,
            timeout_seconds=settings.ai_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def create_analyzer(cls, settings: Settings) -> DocumentAnalyzer:
        return DocumentAnalyzer(
            client=cls.create_client(settings),
            model=settings.ai_model_name,
            temperature=settings.ai_temperature,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.ai_base_url.strip()
            if not url:
                raise ValueError("ai_base_url is required for ai_provider=openai_compatible")
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = ["example", "openai", "openai_compatible", *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS)]
        raise ValueError(f"Unknown AI provider '{provider}'. Choose from: {supported}")
