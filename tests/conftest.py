"""Shared test helpers."""

from typing import Iterable, List

from translate_proxy.errors import PromptInputError


class FakePrompter:
    """Prompter answering from a fixed list; runs out like a closed stdin."""

    def __init__(self, answers: Iterable[str] = ()):
        self.answers: List[str] = list(answers)
        self.questions: List[str] = []
        self.shown: List[str] = []

    def show(self, message: str) -> None:
        self.shown.append(message)

    def ask(self, message: str) -> str:
        self.questions.append(message)
        if not self.answers:
            raise PromptInputError("no more input")
        return self.answers.pop(0)
