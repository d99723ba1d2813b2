# provider.py
# Completion provider adapter.
#
# The loop only needs two things from a model: fragments as they arrive,
# and the full text once the stream has ended. CompletionStream gives both
# over any iterator of string fragments.

import os
from typing import Iterable, Iterator, Protocol

from openai import OpenAI

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class CompletionStream:
    """
    Single-pass fragment stream with an aggregated view.

    Iterating yields fragments as the source produces them. `text` returns
    the concatenation of every fragment; if the stream has not been fully
    consumed yet, it drains the remainder first.
    """

    def __init__(self, fragments: Iterable[str]) -> None:
        self._source = iter(fragments)
        self._seen: list[str] = []
        self._done = False

    def __iter__(self) -> Iterator[str]:
        for fragment in self._source:
            self._seen.append(fragment)
            yield fragment
        self._done = True

    @property
    def done(self) -> bool:
        return self._done

    @property
    def text(self) -> str:
        if not self._done:
            for _ in self:
                pass
        return "".join(self._seen)


class CompletionProvider(Protocol):
    """Anything that turns an instruction into a CompletionStream."""

    def stream(self, prompt: str) -> CompletionStream: ...


class OpenRouterProvider:
    """
    Streams chat completions through the OpenAI SDK.

    Defaults to OpenRouter; any OpenAI-compatible endpoint works via
    `base_url`. The rendered prompt is sent as the system message.

    Example:
        provider = OpenRouterProvider(model="anthropic/claude-3.5-haiku")
        for event in run_agent("List the files", provider=provider, work_dir="."):
            ...
    """

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        base_url: str = OPENROUTER_BASE_URL,
        client: OpenAI | None = None,
    ) -> None:
        self._model = model
        self._client = client or OpenAI(
            base_url=base_url,
            api_key=api_key or os.getenv("OPENROUTER_API_KEY"),
        )

    @property
    def model(self) -> str:
        return self._model

    def _fragments(self, prompt: str) -> Iterator[str]:
        chunks = self._client.chat.completions.create(
            model=self._model,
            messages=[{"role": "system", "content": prompt}],
            stream=True,
        )
        for chunk in chunks:
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                yield content

    def stream(self, prompt: str) -> CompletionStream:
        return CompletionStream(self._fragments(prompt))
