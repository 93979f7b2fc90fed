"""LLM Base Classes and Shared Code"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator

from gitdraft.errors import ExternalToolError


@dataclass
class LLMResponse:
    """Structured response from any LLM provider."""
    content: str
    model: str = ""
    tokens_used: int = 0


@dataclass(frozen=True)
class Draft:
    """A generated commit message (title is None) or pull request."""
    body: str
    title: str | None = None

    def with_body(self, body: str) -> 'Draft':
        return Draft(body=body, title=self.title)


class LLMError(ExternalToolError):
    """Raised when LLM operations fail."""
    pass


class LLMClient(ABC):
    """Abstract base for LLM clients."""

    DEFAULT_TEMPERATURE = 0.3

    @abstractmethod
    def generate(self, prompt: str, system: str | None = None,
                 temperature: float | None = None) -> LLMResponse:
        pass

    def stream(self, prompt: str, system: str | None = None,
               temperature: float | None = None) -> Iterator[str]:
        """Yield the response in pieces. Providers without streaming yield it whole."""
        yield self.generate(prompt, system=system, temperature=temperature).content

    @property
    @abstractmethod
    def name(self) -> str:
        pass
