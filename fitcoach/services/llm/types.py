"""Provider call contract for structured completions."""

from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from pydantic import BaseModel

OutputT = TypeVar("OutputT", bound=BaseModel)


@dataclass(frozen=True)
class GenerationSettings:
    """Per-call generation parameters.

    Attributes:
        temperature: Sampling temperature
        max_tokens: Maximum output size in tokens
        max_attempts: Attempt ceiling for transient provider failures
        timeout: Per-attempt provider timeout in seconds
    """

    temperature: float = 0.7
    max_tokens: int = 6000
    max_attempts: int = 3
    timeout: float | None = 120.0


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    requests: int = 1

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class Completion(Generic[OutputT]):
    """A provider response constrained to ``OutputT``."""

    output: OutputT
    usage: TokenUsage
    model_name: str


class StructuredCompletionProvider(Protocol):
    """Anything that can turn a prompt pair into a schema-constrained object.

    Implementations raise ProviderTransientError for failures worth retrying
    and ProviderFatalError for everything else.
    """

    name: str

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        output_type: type[OutputT],
        settings: GenerationSettings,
    ) -> Completion[OutputT]: ...
