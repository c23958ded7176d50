import unittest
from unittest import mock

from llm_gateway.config import ProviderConfig
from llm_gateway.errors import ConfigurationError, UnsupportedBackendError
from llm_gateway.factory import GatewayFactory
from llm_gateway.providers.anthropic import AnthropicProvider
from llm_gateway.providers.azure import AzureOpenAIProvider
from llm_gateway.providers.openai import OpenAIProvider
from support import CONVERSATION, RecordingTransport, complete

AZURE_ENV = {
    "AZURE_OPENAI_KEY": "az-key",
    "AZURE_OPENAI_ENDPOINT": "https://contoso.openai.azure.com",
    "AZURE_OPENAI_DEPLOYMENT": "gpt4-prod",
}


class GatewayFactoryCreateTests(unittest.TestCase):
    def test_backend_types(self) -> None:
        env = {"ANTHROPIC_API_KEY": "a", "OPENAI_API_KEY": "o", **AZURE_ENV}
        self.assertIsInstance(GatewayFactory.create("anthropic", env=env), AnthropicProvider)
        self.assertIsInstance(GatewayFactory.create("OPENAI", env=env), OpenAIProvider)
        self.assertIsInstance(GatewayFactory.create("Azure-OpenAI", env=env), AzureOpenAIProvider)

    def test_alias_equivalence(self) -> None:
        short = GatewayFactory.create("azure", env=AZURE_ENV)
        long = GatewayFactory.create("azure-openai", env=AZURE_ENV)
        self.assertIs(type(short), type(long))
        self.assertEqual(short.config, long.config)

    def test_default_backend_from_env_then_anthropic(self) -> None:
        env = {"LLM_PROVIDER": "openai", "OPENAI_API_KEY": "o"}
        self.assertIsInstance(GatewayFactory.create(env=env), OpenAIProvider)
        self.assertIsInstance(GatewayFactory.create(env={"ANTHROPIC_API_KEY": "a"}), AnthropicProvider)

    def test_unknown_backend_names_value(self) -> None:
        with self.assertRaises(UnsupportedBackendError) as ctx:
            GatewayFactory.create("palm-2", env={})
        self.assertIn("palm-2", str(ctx.exception))

        with self.assertRaises(ConfigurationError) as ctx:
            GatewayFactory.create(env={"LLM_PROVIDER": "cohere"})
        self.assertIn("cohere", str(ctx.exception))

    def test_missing_key_fails_without_network(self) -> None:
        with self.assertRaises(ConfigurationError):
            GatewayFactory.create("openai", env={})

    def test_explicit_config_overrides_env(self) -> None:
        env = {"OPENAI_API_KEY": "env-key", "OPENAI_MODEL": "gpt-env"}
        adapter = GatewayFactory.create("openai", ProviderConfig(model="gpt-explicit"), env=env)
        self.assertEqual(adapter.config.model, "gpt-explicit")
        self.assertEqual(adapter.config.api_key, "env-key")

    def test_explicit_azure_base_url_overrides_env_endpoint(self) -> None:
        transport = RecordingTransport({"choices": [{"message": {"content": "ok"}}]})
        env = {**AZURE_ENV, "AZURE_OPENAI_ENDPOINT": "https://env.openai.azure.com"}
        adapter = GatewayFactory.create(
            "azure",
            ProviderConfig(base_url="https://explicit.openai.azure.com"),
            env=env,
            transport=transport,
        )
        self.assertEqual(complete(adapter, CONVERSATION), "ok")
        self.assertTrue(str(transport.last_request.url).startswith("https://explicit.openai.azure.com/"))

    def test_reads_process_environment_when_env_omitted(self) -> None:
        with mock.patch.dict("os.environ", {"ANTHROPIC_API_KEY": "from-process"}, clear=True):
            adapter = GatewayFactory.create("anthropic")
        self.assertEqual(adapter.config.api_key, "from-process")

    def test_end_to_end_with_transport(self) -> None:
        transport = RecordingTransport({"content": [{"type": "text", "text": "4"}]})
        adapter = GatewayFactory.create(
            "anthropic",
            env={"ANTHROPIC_API_KEY": "a", "ANTHROPIC_MODEL": "claude-env"},
            transport=transport,
        )
        self.assertEqual(complete(adapter, CONVERSATION), "4")
        self.assertEqual(transport.last_payload["model"], "claude-env")


class GatewayFactoryAvailabilityTests(unittest.TestCase):
    def test_list_available_backends(self) -> None:
        self.assertEqual(GatewayFactory.list_available_backends(), ["anthropic", "openai", "azure-openai"])

    def test_is_available(self) -> None:
        self.assertTrue(GatewayFactory.is_available("anthropic", env={"ANTHROPIC_API_KEY": "a"}))
        self.assertFalse(GatewayFactory.is_available("anthropic", env={"OPENAI_API_KEY": "o"}))
        self.assertTrue(GatewayFactory.is_available("OpenAI", env={"OPENAI_API_KEY": "o"}))
        self.assertFalse(GatewayFactory.is_available("openai", env={"OPENAI_API_KEY": ""}))

    def test_azure_needs_key_and_endpoint(self) -> None:
        self.assertTrue(GatewayFactory.is_available("azure", env=AZURE_ENV))
        self.assertTrue(
            GatewayFactory.is_available(
                "azure-openai",
                env={"AZURE_OPENAI_API_KEY": "k", "AZURE_OPENAI_ENDPOINT": "https://x.openai.azure.com"},
            )
        )
        self.assertFalse(GatewayFactory.is_available("azure", env={"AZURE_OPENAI_KEY": "k"}))
        self.assertFalse(
            GatewayFactory.is_available("azure", env={"AZURE_OPENAI_ENDPOINT": "https://x.openai.azure.com"})
        )

    def test_unknown_backend_is_unavailable(self) -> None:
        self.assertFalse(GatewayFactory.is_available("gemini", env={"GEMINI_API_KEY": "g"}))
        self.assertFalse(GatewayFactory.is_available(None))  # type: ignore[arg-type]

    def test_is_available_makes_no_http_client(self) -> None:
        with mock.patch("httpx.AsyncClient") as client_cls:
            GatewayFactory.is_available("openai", env={"OPENAI_API_KEY": "o"})
            GatewayFactory.is_available("azure", env=AZURE_ENV)
        client_cls.assert_not_called()

    def test_is_available_reads_process_environment(self) -> None:
        with mock.patch.dict("os.environ", {"OPENAI_API_KEY": "o"}, clear=True):
            self.assertTrue(GatewayFactory.is_available("openai"))
            self.assertFalse(GatewayFactory.is_available("anthropic"))


if __name__ == "__main__":
    unittest.main()
