"""
AI Provider Adapters

Uniform wrappers around the text-generation backends Dr. Mimu consults:
- Gemini (Google, via its OpenAI-compatible endpoint)
- OpenAI GPT
- DeepSeek

All three speak the OpenAI chat-completions wire format, so a single
``OpenAICompatibleAdapter`` built on ``openai.AsyncOpenAI`` covers them; the
subclasses only pin identity, default model and endpoint.

The ``ProviderRegistry`` is an explicit object handed to the aggregator.
Adapters are registered in a fixed order (Gemini, OpenAI, DeepSeek), which is
also the tie-break order when two answers score the same confidence.
"""

import logging
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional

import openai
from openai import AsyncOpenAI

from .locale import check_locale, t

logger = logging.getLogger(__name__)


class ProviderId(Enum):
    GEMINI = "gemini"
    OPENAI = "openai"
    DEEPSEEK = "deepseek"


class ProviderError(Exception):
    """Base class for a failed provider call."""

    def __init__(self, provider_id: ProviderId, message: str = ""):
        self.provider_id = provider_id
        self.message = message
        super().__init__(f"[{provider_id.value}] {message}" if message else provider_id.value)


class ProviderAuthError(ProviderError):
    """Credential rejected by the backend."""


class ProviderRateLimited(ProviderError):
    """Backend quota or rate limit exceeded."""


class ProviderNetworkError(ProviderError):
    """Transport failure, timeout, or unexpected backend response."""


class ProviderUnavailable(ProviderError):
    """Adapter called without a usable credential."""


PLACEHOLDER_PREFIXES = ("your-", "your_", "sk-xxx")


def is_usable_credential(credential: Optional[str]) -> bool:
    """True for a non-blank credential that is not a template placeholder."""
    if credential is None:
        return False
    value = credential.strip()
    if not value:
        return False
    return not value.lower().startswith(PLACEHOLDER_PREFIXES)


class ProviderAdapter:
    """
    One AI backend.

    Subclasses implement ``_complete``. The adapter is only ``ready`` after
    ``configure`` received a usable credential; unready adapters are skipped
    by the aggregator and raise ``ProviderUnavailable`` if called directly.
    """

    provider_id: ProviderId
    display_name: str = ""

    def __init__(self):
        self._credential: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self._credential is not None

    def configure(self, credential: Optional[str]) -> bool:
        """
        Arm or disarm the adapter.

        Args:
            credential: API key; blank, missing or placeholder values disarm

        Returns:
            Whether the adapter is now ready
        """
        if not is_usable_credential(credential):
            if self._credential is not None:
                logger.info("Provider %s disarmed", self.provider_id.value)
            self._credential = None
            self._on_disarm()
            return False

        self._credential = credential.strip()
        self._on_arm()
        logger.info("Provider %s armed", self.provider_id.value)
        return True

    def _on_arm(self) -> None:
        pass

    def _on_disarm(self) -> None:
        pass

    def system_prompt(self, locale: str) -> str:
        return t("provider.system_prompt", locale)

    async def generate(self, prompt: str, locale: str) -> str:
        """
        Send one prompt to the backend.

        Args:
            prompt: User text
            locale: "bn" or "en"; selects the system prompt

        Returns:
            Generated reply text
        """
        check_locale(locale)
        if not self.ready:
            raise ProviderUnavailable(self.provider_id, "no credential configured")
        return await self._complete(prompt, locale)

    async def _complete(self, prompt: str, locale: str) -> str:
        raise NotImplementedError


class OpenAICompatibleAdapter(ProviderAdapter):
    """Adapter for any backend exposing OpenAI-style chat completions."""

    default_model: str = ""
    default_base_url: Optional[str] = None

    def __init__(
        self,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 20.0,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        client_factory: Optional[Callable[..., AsyncOpenAI]] = None,
    ):
        super().__init__()
        self.model = model or self.default_model
        self.base_url = base_url or self.default_base_url
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client_factory = client_factory or AsyncOpenAI
        self._client = None

    def _on_arm(self) -> None:
        # No SDK retries: a failed call is reported, never repeated.
        self._client = self._client_factory(
            api_key=self._credential,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
        )

    def _on_disarm(self) -> None:
        self._client = None

    async def _complete(self, prompt: str, locale: str) -> str:
        pid = self.provider_id
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt(locale)},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise ProviderAuthError(pid, "credential rejected") from e
        except openai.RateLimitError as e:
            raise ProviderRateLimited(pid, "rate limit exceeded") from e
        except openai.APITimeoutError as e:
            raise ProviderNetworkError(pid, "request timed out") from e
        except openai.APIConnectionError as e:
            raise ProviderNetworkError(pid, "connection failed") from e
        except openai.APIStatusError as e:
            raise ProviderNetworkError(pid, f"HTTP {e.status_code}") from e
        except openai.APIError as e:
            raise ProviderNetworkError(pid, str(e)) from e

        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise ProviderNetworkError(pid, "empty completion")
        return content.strip()


class GeminiAdapter(OpenAICompatibleAdapter):
    provider_id = ProviderId.GEMINI
    display_name = "Gemini"
    default_model = "gemini-1.5-flash"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta/openai/"


class OpenAIAdapter(OpenAICompatibleAdapter):
    provider_id = ProviderId.OPENAI
    display_name = "OpenAI GPT"
    default_model = "gpt-4o-mini"
    default_base_url = None


class DeepSeekAdapter(OpenAICompatibleAdapter):
    provider_id = ProviderId.DEEPSEEK
    display_name = "DeepSeek"
    default_model = "deepseek-chat"
    default_base_url = "https://api.deepseek.com/v1"


class ProviderRegistry:
    """
    Ordered collection of provider adapters.

    Example:
        >>> registry = ProviderRegistry.from_settings(load_settings())
        >>> registry.available_providers()
        ['Gemini', 'DeepSeek']
    """

    def __init__(self, adapters: Optional[List[ProviderAdapter]] = None):
        self._adapters: Dict[ProviderId, ProviderAdapter] = {}
        for adapter in adapters or []:
            self.register(adapter)

    @classmethod
    def from_settings(cls, settings) -> "ProviderRegistry":
        """Build the standard three-vendor registry and arm it from settings."""
        common = dict(
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
            max_tokens=settings.PROVIDER_MAX_TOKENS,
            temperature=settings.PROVIDER_TEMPERATURE,
        )
        registry = cls([
            GeminiAdapter(settings.GEMINI_MODEL, settings.GEMINI_BASE_URL, **common),
            OpenAIAdapter(settings.OPENAI_MODEL, settings.OPENAI_BASE_URL, **common),
            DeepSeekAdapter(settings.DEEPSEEK_MODEL, settings.DEEPSEEK_BASE_URL, **common),
        ])
        registry.reconfigure(settings)
        return registry

    def register(self, adapter: ProviderAdapter) -> None:
        if adapter.provider_id in self._adapters:
            raise ValueError(f"Provider already registered: {adapter.provider_id.value}")
        self._adapters[adapter.provider_id] = adapter

    def get(self, provider_id: ProviderId) -> ProviderAdapter:
        return self._adapters[provider_id]

    @property
    def adapters(self) -> List[ProviderAdapter]:
        return list(self._adapters.values())

    def configure(self, credentials: Mapping[ProviderId, Optional[str]]) -> int:
        """
        Re-arm adapters named in ``credentials``; others are left as they are.

        Returns:
            Number of ready adapters afterwards
        """
        for provider_id, credential in credentials.items():
            if provider_id not in self._adapters:
                raise KeyError(f"Unknown provider: {provider_id}")
            self._adapters[provider_id].configure(credential)
        ready = len(self.ready_adapters())
        logger.info("%d of %d providers ready", ready, len(self._adapters))
        return ready

    def reconfigure(self, settings) -> int:
        """Apply the credentials held by a ``Settings`` object."""
        credentials = {
            ProviderId.GEMINI: settings.GEMINI_API_KEY,
            ProviderId.OPENAI: settings.OPENAI_API_KEY,
            ProviderId.DEEPSEEK: settings.DEEPSEEK_API_KEY,
        }
        return self.configure(
            {pid: key for pid, key in credentials.items() if pid in self._adapters}
        )

    def ready_adapters(self) -> List[ProviderAdapter]:
        """Ready adapters in registration order."""
        return [a for a in self._adapters.values() if a.ready]

    def has_any(self) -> bool:
        return any(a.ready for a in self._adapters.values())

    def available_providers(self) -> List[str]:
        return [a.display_name or a.provider_id.value for a in self.ready_adapters()]
