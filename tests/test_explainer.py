import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from config import SimulationConfig
from explainer import (
    EMPTY_RESPONSE_MESSAGE,
    REQUEST_FAILED_MESSAGE,
    AnthropicExplanationClient,
    ExplainerUnavailable,
    ExplanationClient,
    build_explanation_client,
    build_explanation_prompt,
    get_rdd_explanation,
)


class RecordingClient:
    def __init__(self, reply="The jump is the causal effect."):
        self.reply = reply
        self.prompts = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


class FailingClient:
    def generate(self, prompt: str) -> str:
        raise ConnectionError("network down")


def test_prompt_mentions_every_parameter():
    config = SimulationConfig(cutoff=42, effect_size=-7, noise_level=8.5, slope=1.2, curvature=-3)
    prompt = build_explanation_prompt(config)

    assert "Cutoff (Threshold): 42" in prompt
    assert "Treatment Effect (Jump): -7" in prompt
    assert "Noise Level (Variance): 8.5" in prompt
    assert "Underlying Function Slope: 1.2" in prompt
    assert "Curvature (Non-linearity): -3" in prompt
    assert "(8.5 > 5)" in prompt


def test_missing_key_yields_unavailable_state(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    client = build_explanation_client()

    assert isinstance(client, ExplainerUnavailable)
    assert "API Key is missing" in get_rdd_explanation(SimulationConfig(), client)


def test_blank_key_is_treated_as_missing():
    assert isinstance(build_explanation_client(api_key="   "), ExplainerUnavailable)


def test_key_from_environment_builds_anthropic_client(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.setenv("RDD_EXPLAINER_MODEL", "claude-test-model")
    client = build_explanation_client()

    assert isinstance(client, AnthropicExplanationClient)
    assert isinstance(client, ExplanationClient)
    assert client.model == "claude-test-model"


def test_explanation_passes_prompt_to_client():
    client = RecordingClient()
    config = SimulationConfig(cutoff=33)

    assert get_rdd_explanation(config, client) == "The jump is the causal effect."
    assert client.prompts == [build_explanation_prompt(config)]


def test_empty_reply_falls_back_to_static_text():
    assert get_rdd_explanation(SimulationConfig(), RecordingClient(reply="")) == EMPTY_RESPONSE_MESSAGE


def test_client_errors_are_converted_to_text(caplog):
    text = get_rdd_explanation(SimulationConfig(), FailingClient())

    assert text == REQUEST_FAILED_MESSAGE
    assert "Explanation request failed" in caplog.text


def test_anthropic_client_joins_text_blocks():
    client = AnthropicExplanationClient(api_key="test-key", model="m", max_tokens=50)
    calls = []

    def fake_create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(content=[SimpleNamespace(text="Hello "), SimpleNamespace(text="world. ")])

    client._client = SimpleNamespace(messages=SimpleNamespace(create=fake_create))

    assert client.generate("prompt") == "Hello world."
    assert calls[0]["model"] == "m"
    assert calls[0]["max_tokens"] == 50
    assert calls[0]["messages"] == [{"role": "user", "content": "prompt"}]


def test_unavailable_state_is_immutable():
    state = ExplainerUnavailable()
    with pytest.raises(AttributeError):
        state.reason = "other"
