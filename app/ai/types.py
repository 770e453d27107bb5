from dataclasses import dataclass
from typing import Literal, Protocol, Sequence


Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


class EvaluatorConfigError(RuntimeError):
    def __init__(self, message: str, *, code: str = "evaluator_not_configured"):
        super().__init__(message)
        self.code = code


class Evaluator(Protocol):
    model: str

    async def complete_json(
        self, messages: Sequence[ChatMessage], *, temperature: float
    ) -> str: ...
