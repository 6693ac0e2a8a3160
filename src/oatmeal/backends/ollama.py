"""Ollama backend using the generate endpoint's numeric context for continuity."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx
from ollama import AsyncClient, ResponseError

from ..exceptions import (
    ConnectorUnavailableError,
    ModelNotFoundError,
    OatmealError,
)
from ..models import Author, BackendResponse
from .base import Backend

if TYPE_CHECKING:
    from ..channel import Channel
    from ..models import BackendPrompt

LOGGER = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://localhost:11434"


class OllamaBackend(Backend):
    """Stream completions from an Ollama server."""

    name = "ollama"

    def __init__(
        self,
        url: str = DEFAULT_OLLAMA_URL,
        timeout: int = 120,
        client: Any | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client if client is not None else AsyncClient(host=url, timeout=timeout)

    async def health_check(self) -> None:
        try:
            await self._client.list()
        except Exception as exc:  # noqa: BLE001 - external API can fail in many ways.
            raise self._map_exception(exc) from exc

    async def list_models(self) -> list[str]:
        """Return available model names from Ollama."""
        try:
            response = await self._client.list()
        except Exception as exc:  # noqa: BLE001
            raise self._map_exception(exc) from exc

        models: Any = None
        if hasattr(response, "models"):
            models = response.models
        elif isinstance(response, dict):
            models = response.get("models")

        names: list[str] = []
        for model in models or []:
            for key in ("model", "name"):
                value = model.get(key) if isinstance(model, dict) else getattr(model, key, None)
                if isinstance(value, str) and value.strip():
                    names.append(value.strip())
                    break
        return names

    @staticmethod
    def encode_context(context: Any) -> str | None:
        """Serialise Ollama's numeric context into an opaque token."""
        if not context:
            return None
        return json.dumps(list(context))

    @staticmethod
    def decode_context(backend_context: str) -> list[int] | None:
        if not backend_context:
            return None
        try:
            decoded = json.loads(backend_context)
        except json.JSONDecodeError:
            LOGGER.warning(
                "ollama.context.invalid",
                extra={"event": "ollama.context.invalid"},
            )
            return None
        if not isinstance(decoded, list):
            return None
        return [int(item) for item in decoded]

    @staticmethod
    def _extract(chunk: Any, field: str) -> Any:
        if isinstance(chunk, dict):
            return chunk.get(field)
        return getattr(chunk, field, None)

    async def get_completion(
        self,
        prompt: BackendPrompt,
        model: str,
        tx: Channel[BackendResponse],
    ) -> None:
        LOGGER.info(
            "ollama.completion.start",
            extra={"event": "ollama.completion.start", "model": model},
        )
        try:
            stream = await self._client.generate(
                model=model,
                prompt=prompt.text,
                context=self.decode_context(prompt.backend_context),
                stream=True,
            )
            async for chunk in stream:
                text = self._extract(chunk, "response")
                done = bool(self._extract(chunk, "done"))
                tx.send(
                    BackendResponse(
                        author=Author.MODEL,
                        text=text if isinstance(text, str) else "",
                        done=done,
                        context=(
                            self.encode_context(self._extract(chunk, "context"))
                            if done
                            else None
                        ),
                    )
                )
                if done:
                    break
        except OatmealError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise self._map_exception(exc, model) from exc
        LOGGER.info(
            "ollama.completion.done",
            extra={"event": "ollama.completion.done", "model": model},
        )

    def _map_exception(self, exc: Exception, model: str = "") -> OatmealError:
        if isinstance(exc, OatmealError):
            return exc
        if isinstance(
            exc,
            (
                httpx.ConnectError,
                httpx.ConnectTimeout,
                httpx.ReadTimeout,
                httpx.NetworkError,
                ConnectionError,
            ),
        ):
            return ConnectorUnavailableError(f"Unable to connect to Ollama at {self.url}.")
        if isinstance(exc, ResponseError) and exc.status_code == 404:
            return ModelNotFoundError(f"Model {model!r} was not found on {self.url}.")
        return ConnectorUnavailableError(f"Ollama request to {self.url} failed: {exc}")
