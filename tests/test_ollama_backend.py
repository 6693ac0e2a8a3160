"""Tests for the Ollama backend connector."""

from __future__ import annotations

from collections.abc import AsyncGenerator
import unittest

import httpx
from ollama import ResponseError

from oatmeal.backends import BackendManager, OllamaBackend
from oatmeal.channel import Channel
from oatmeal.exceptions import ConfigError, ConnectorUnavailableError, ModelNotFoundError
from oatmeal.models import Author, BackendPrompt, BackendResponse


async def _chunk_stream(chunks: list[dict]) -> AsyncGenerator[dict, None]:
    for chunk in chunks:
        yield chunk


class FakeClient:
    """Simple fake Ollama client for deterministic tests."""

    def __init__(
        self,
        chunks: list[dict] | None = None,
        models: list[str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.chunks = chunks or []
        self.models = models if models is not None else ["llama3.2:latest"]
        self.error = error
        self.generate_kwargs: list[dict] = []

    async def list(self) -> dict[str, list[dict[str, str]]]:
        if self.error is not None:
            raise self.error
        return {"models": [{"model": name} for name in self.models]}

    async def generate(self, **kwargs) -> AsyncGenerator[dict, None]:
        self.generate_kwargs.append(kwargs)
        if self.error is not None:
            raise self.error
        return _chunk_stream(self.chunks)


class _ModelEntry:
    def __init__(self, model: str) -> None:
        self.model = model


class _ListResponse:
    def __init__(self, names: list[str]) -> None:
        self.models = [_ModelEntry(name) for name in names]


class OllamaBackendTests(unittest.IsolatedAsyncioTestCase):
    """Async backend behavior with a fake client."""

    async def test_list_models_accepts_dicts_and_objects(self) -> None:
        backend = OllamaBackend(client=FakeClient(models=["llama3.2", "mistral"]))
        self.assertEqual(await backend.list_models(), ["llama3.2", "mistral"])

        class ObjectClient(FakeClient):
            async def list(self) -> _ListResponse:
                return _ListResponse(["qwen2.5"])

        backend = OllamaBackend(client=ObjectClient())
        self.assertEqual(await backend.list_models(), ["qwen2.5"])

    async def test_completion_streams_chunks_and_context(self) -> None:
        client = FakeClient(
            chunks=[
                {"response": "Hel", "done": False},
                {"response": "lo", "done": False},
                {"response": "", "done": True, "context": [1, 2, 3]},
            ]
        )
        backend = OllamaBackend(client=client)
        tx: Channel[BackendResponse] = Channel("responses")

        await backend.get_completion(
            BackendPrompt("hi", backend_context="[7, 8]"), "llama3.2", tx
        )

        received = [tx.try_recv() for _ in range(3)]
        self.assertEqual([item.text for item in received], ["Hel", "lo", ""])
        self.assertEqual([item.done for item in received], [False, False, True])
        self.assertTrue(all(item.author is Author.MODEL for item in received))
        self.assertIsNone(received[0].context)
        self.assertEqual(received[-1].context, "[1, 2, 3]")
        self.assertIsNone(tx.try_recv())

        kwargs = client.generate_kwargs[0]
        self.assertEqual(kwargs["model"], "llama3.2")
        self.assertEqual(kwargs["prompt"], "hi")
        self.assertEqual(kwargs["context"], [7, 8])
        self.assertTrue(kwargs["stream"])

    async def test_first_prompt_sends_no_context(self) -> None:
        client = FakeClient(chunks=[{"response": "ok", "done": True, "context": [4]}])
        await OllamaBackend(client=client).get_completion(
            BackendPrompt("hi"), "llama3.2", Channel()
        )
        self.assertIsNone(client.generate_kwargs[0]["context"])

    async def test_connection_errors_map_to_connector_unavailable(self) -> None:
        backend = OllamaBackend(client=FakeClient(error=httpx.ConnectError("refused")))
        with self.assertRaises(ConnectorUnavailableError):
            await backend.health_check()
        with self.assertRaises(ConnectorUnavailableError):
            await backend.list_models()

    async def test_missing_model_maps_to_model_not_found(self) -> None:
        backend = OllamaBackend(
            client=FakeClient(error=ResponseError("model not found", 404))
        )
        with self.assertRaises(ModelNotFoundError):
            await backend.get_completion(BackendPrompt("hi"), "ghost", Channel())

    def test_context_encoding(self) -> None:
        self.assertEqual(OllamaBackend.encode_context([1, 2]), "[1, 2]")
        self.assertIsNone(OllamaBackend.encode_context(None))
        self.assertEqual(OllamaBackend.decode_context("[1, 2]"), [1, 2])
        self.assertIsNone(OllamaBackend.decode_context(""))
        self.assertIsNone(OllamaBackend.decode_context("{}"))

    def test_invalid_context_is_logged_and_dropped(self) -> None:
        with self.assertLogs("oatmeal.backends.ollama", level="WARNING"):
            self.assertIsNone(OllamaBackend.decode_context("not json"))


class BackendManagerTests(unittest.TestCase):
    """Validate backend resolution by name."""

    def test_resolves_ollama_with_configured_endpoint(self) -> None:
        manager = BackendManager(ollama_url="http://127.0.0.1:9999", timeout=5)
        backend = manager.get("Ollama")
        self.assertIsInstance(backend, OllamaBackend)
        self.assertEqual(backend.url, "http://127.0.0.1:9999")
        self.assertEqual(backend.timeout, 5)
        self.assertIs(manager.get("ollama"), backend)

    def test_unknown_or_empty_backend_raises(self) -> None:
        manager = BackendManager()
        with self.assertRaises(ConfigError):
            manager.get("openai")
        with self.assertRaises(ConfigError):
            manager.get("")


if __name__ == "__main__":
    unittest.main()
