"""Text-generation providers: Groq, OpenAI, Claude.

Each provider exposes:
 - chat(messages, model, temperature, max_tokens, system_prompt) -> (reply, tokens_in, tokens_out)
"""

from __future__ import annotations

from abc import ABC, abstractmethod

# ── Cost per 1M tokens (input/output) in USD ──
COST_TABLE: dict[str, dict[str, tuple[float, float]]] = {
    "groq": {
        "llama3-70b-8192": (0.59, 0.79),
        "llama-3.3-70b-versatile": (0.59, 0.79),
        "llama3-8b-8192": (0.05, 0.08),
    },
    "openai": {
        "gpt-4o": (2.50, 10.0),
        "gpt-4o-mini": (0.15, 0.60),
    },
    "claude": {
        "claude-sonnet-4-20250514": (3.0, 15.0),
        "claude-haiku-3-5-20241022": (0.80, 4.0),
    },
}


def estimate_cost(provider: str, model: str, tokens_in: int, tokens_out: int) -> float:
    """Estimate cost in USD for a given call."""
    table = COST_TABLE.get(provider, {})
    rates = table.get(model, (0.0, 0.0))
    return (tokens_in * rates[0] + tokens_out * rates[1]) / 1_000_000


# ══════════════════════════════════════════════════════════════════════
# Abstract base
# ══════════════════════════════════════════════════════════════════════


class LLMProvider(ABC):
    """Base class for LLM providers."""

    name: str = "unknown"

    @abstractmethod
    async def chat(
        self,
        messages: list[dict],
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
    ) -> tuple[str, int, int]:
        """Return (reply_text, tokens_in, tokens_out)."""
        ...


# ══════════════════════════════════════════════════════════════════════
# OpenAI (and OpenAI-compatible endpoints)
# ══════════════════════════════════════════════════════════════════════


class OpenAIProvider(LLMProvider):
    name = "openai"
    default_model = "gpt-4o-mini"
    base_url: str | None = None

    def __init__(self, api_key: str):
        from openai import AsyncOpenAI
        self.client = AsyncOpenAI(api_key=api_key, base_url=self.base_url)

    async def chat(self, messages, model, temperature, max_tokens, system_prompt):
        model = model or self.default_model

        api_messages = []
        if system_prompt:
            api_messages.append({"role": "system", "content": system_prompt})
        api_messages.extend(
            {"role": m["role"], "content": m["content"]}
            for m in messages if m["role"] != "system"
        )

        resp = await self.client.chat.completions.create(
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=api_messages,
        )
        choice = resp.choices[0]
        usage = resp.usage
        tokens_in = usage.prompt_tokens if usage else 0
        tokens_out = usage.completion_tokens if usage else 0
        return choice.message.content or "", tokens_in, tokens_out


class GroqProvider(OpenAIProvider):
    """Groq serves an OpenAI-compatible chat completions API."""

    name = "groq"
    default_model = "llama3-70b-8192"
    base_url = "https://api.groq.com/openai/v1"


# ══════════════════════════════════════════════════════════════════════
# Claude (Anthropic)
# ══════════════════════════════════════════════════════════════════════


class ClaudeProvider(LLMProvider):
    name = "claude"

    def __init__(self, api_key: str):
        import anthropic
        self.async_client = anthropic.AsyncAnthropic(api_key=api_key)

    async def chat(self, messages, model, temperature, max_tokens, system_prompt):
        model = model or "claude-sonnet-4-20250514"

        # Anthropic uses a separate system param, not in messages list
        api_messages = [{"role": m["role"], "content": m["content"]} for m in messages if m["role"] != "system"]

        resp = await self.async_client.messages.create(
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system_prompt,
            messages=api_messages,
        )
        reply = resp.content[0].text
        return reply, resp.usage.input_tokens, resp.usage.output_tokens


# ══════════════════════════════════════════════════════════════════════
# Factory
# ══════════════════════════════════════════════════════════════════════

PROVIDER_MAP = {
    "groq": GroqProvider,
    "openai": OpenAIProvider,
    "claude": ClaudeProvider,
}


def get_provider(provider_name: str, api_key: str) -> LLMProvider:
    """Create an LLM provider instance."""
    cls = PROVIDER_MAP.get(provider_name.lower())
    if cls is None:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
    return cls(api_key=api_key)
