from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Protocol, Union, runtime_checkable

import anthropic

from config import SimulationConfig

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"

MISSING_KEY_MESSAGE = (
    "API Key is missing. Please configure ANTHROPIC_API_KEY to receive AI insights."
)
EMPTY_RESPONSE_MESSAGE = "No explanation generated."
REQUEST_FAILED_MESSAGE = (
    "An error occurred while fetching the explanation. "
    "Please check your API limits or connection."
)

EXPLANATION_PROMPT = """You are a world-class econometrics professor akin to the style of 3blue1brown.
Explain the Regression Discontinuity Design (RDD) simulation currently shown to the user.

Current Parameters:
- Cutoff (Threshold): {cutoff:g}
- Treatment Effect (Jump): {effect_size:g}
- Noise Level (Variance): {noise_level:g}
- Underlying Function Slope: {slope:g}
- Curvature (Non-linearity): {curvature:g}

Your goal:
1. Explain intuitively what the "Jump" at the cutoff {cutoff:g} represents in causal terms.
2. If the noise is high ({noise_level:g} > 5), warn about statistical power.
3. If curvature is high, mention the risk of mistaking non-linearity for a discontinuity.
4. Keep it concise (max 3 paragraphs), engaging, and use Markdown for bolding key terms."""


@runtime_checkable
class ExplanationClient(Protocol):
    """Anything that turns a prompt into free-form text."""

    def generate(self, prompt: str) -> str:
        ...


@dataclass(frozen=True)
class ExplainerUnavailable:
    reason: str = MISSING_KEY_MESSAGE


class AnthropicExplanationClient:
    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, max_tokens: int = 1024):
        self.model = model
        self.max_tokens = max_tokens
        self._client = anthropic.Anthropic(api_key=api_key)

    def generate(self, prompt: str) -> str:
        message = self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        parts = [getattr(block, "text", "") for block in message.content]
        return "".join(parts).strip()


def build_explanation_client(
    api_key: Optional[str] = None,
    model: Optional[str] = None,
) -> Union[ExplanationClient, ExplainerUnavailable]:
    """
    Construct a client at call time. Falls back to ANTHROPIC_API_KEY and
    RDD_EXPLAINER_MODEL from the environment; a missing key yields
    ExplainerUnavailable rather than an error.
    """
    key = (api_key if api_key is not None else os.environ.get("ANTHROPIC_API_KEY", "")).strip()
    if not key:
        return ExplainerUnavailable()
    model = model or os.environ.get("RDD_EXPLAINER_MODEL", "").strip() or DEFAULT_MODEL
    return AnthropicExplanationClient(api_key=key, model=model)


def build_explanation_prompt(config: SimulationConfig) -> str:
    return EXPLANATION_PROMPT.format(
        cutoff=config.cutoff,
        effect_size=config.effect_size,
        noise_level=config.noise_level,
        slope=config.slope,
        curvature=config.curvature,
    )


def get_rdd_explanation(
    config: SimulationConfig,
    client: Union[ExplanationClient, ExplainerUnavailable],
) -> str:
    """Return explanation text for `config`. Failures come back as a readable message, never an exception."""
    if isinstance(client, ExplainerUnavailable):
        return client.reason

    try:
        text = client.generate(build_explanation_prompt(config))
    except Exception:
        logger.exception("Explanation request failed")
        return REQUEST_FAILED_MESSAGE

    return text or EMPTY_RESPONSE_MESSAGE
