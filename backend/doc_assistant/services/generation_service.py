"""
Text generation client.

Talks to an OpenAI-compatible completion server (llama-server hosting the
local Mistral model) or, with generation_provider="azure", to Azure AI Foundry.
One attempt per call, bounded by an explicit timeout; every failure surfaces as
GenerationUnavailable.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import requests
from openai import APIConnectionError, APIError, APITimeoutError, AzureOpenAI, OpenAI

from doc_assistant.config import settings
from doc_assistant.exceptions import GenerationUnavailable

logger = logging.getLogger(__name__)


def generation_configured() -> bool:
    if settings.generation_provider == "azure":
        return bool(
            settings.azure_foundry_endpoint
            and settings.azure_foundry_api_key
            and settings.azure_foundry_deployment_name
        )
    return bool(settings.generation_base_url)


def _build_client():
    if settings.generation_provider == "azure":
        endpoint = settings.azure_foundry_endpoint
        if not endpoint.endswith("/"):
            endpoint = endpoint + "/"
        return AzureOpenAI(
            api_key=settings.azure_foundry_api_key,
            api_version=settings.azure_foundry_api_version,
            azure_endpoint=endpoint,
            max_retries=0,
            timeout=settings.generation_timeout_seconds,
        )
    return OpenAI(
        base_url=settings.generation_base_url,
        api_key=settings.generation_api_key,
        max_retries=0,
        timeout=settings.generation_timeout_seconds,
    )


class TextGenerationService:
    """Prompt string in, generated text out."""

    def __init__(self, client=None, model: Optional[str] = None):
        self._client = client
        if model:
            self.model = model
        elif settings.generation_provider == "azure":
            self.model = settings.azure_foundry_deployment_name
        else:
            self.model = settings.generation_model

    @property
    def enabled(self) -> bool:
        return self._client is not None or generation_configured()

    @property
    def client(self):
        if self._client is None:
            if not generation_configured():
                raise GenerationUnavailable("Text generation is not configured")
            self._client = _build_client()
        return self._client

    def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        stop: Sequence[str] = (),
        timeout: float | None = None,
    ) -> str:
        """
        Complete a fully rendered prompt.

        Raises:
            GenerationUnavailable: transport failure, timeout, non-success status,
                malformed payload or empty output.
        """
        try:
            response = self.client.completions.create(
                model=self.model,
                prompt=prompt,
                temperature=settings.generation_temperature if temperature is None else temperature,
                max_tokens=max_tokens or settings.generation_max_tokens,
                stop=list(stop) or None,
                timeout=timeout or settings.generation_timeout_seconds,
            )
            text = (response.choices[0].text or "").strip()
        except (APITimeoutError, APIConnectionError) as exc:
            raise GenerationUnavailable(f"Generation server unreachable: {exc}") from exc
        except APIError as exc:
            raise GenerationUnavailable(f"Generation server error: {exc}") from exc
        except (IndexError, AttributeError, TypeError) as exc:
            raise GenerationUnavailable(f"Malformed generation payload: {exc!r}") from exc

        if not text:
            raise GenerationUnavailable("Generation returned empty output")
        return text


def health_url() -> Optional[str]:
    """The llama-server health endpoint lives at the server root, not under /v1."""
    if settings.generation_provider == "azure" or not settings.generation_base_url:
        return None
    root = settings.generation_base_url.rstrip("/")
    if root.endswith("/v1"):
        root = root[: -len("/v1")]
    return f"{root}/health"


def check_generation_health(timeout: float | None = None) -> bool:
    """Readiness check for the generation server. Azure deployments are assumed ready when configured."""
    if settings.generation_provider == "azure":
        return generation_configured()
    url = health_url()
    if not url:
        return False
    try:
        resp = requests.get(url, timeout=timeout or settings.health_check_timeout_seconds)
    except requests.RequestException as exc:
        logger.warning("Generation health check failed: %s", exc, extra={"error": type(exc).__name__})
        return False
    return resp.ok
