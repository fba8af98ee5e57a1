"""
Interactive prompting used during startup (OAuth token entry, cloud and folder
choices). Resolution code depends only on the `Prompter` protocol.
"""

import logging
from typing import Callable, Optional, Protocol, Sequence, TypeVar

from ..config import PROMPT_MAX_ATTEMPTS
from ..errors import PromptInputError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Prompter(Protocol):
    def show(self, message: str) -> None:
        """Display a line of text to the operator."""
        ...

    def ask(self, message: str) -> str:
        """
        Ask for one line of input.

        Raises:
            PromptInputError: If no input can be obtained
        """
        ...


class ConsolePrompter:
    """Prompter backed by stdin/stdout."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ):
        self._input = input_func
        self._output = output_func

    def show(self, message: str) -> None:
        self._output(message)

    def ask(self, message: str) -> str:
        try:
            return self._input(message).strip()
        except (EOFError, KeyboardInterrupt) as e:
            raise PromptInputError(f"no input for prompt {message.strip()!r}") from e


def choose(
    prompter: Prompter,
    title: str,
    items: Sequence[T],
    describe: Callable[[int, T], str],
    kind: str = "item",
    max_attempts: int = PROMPT_MAX_ATTEMPTS,
) -> T:
    """
    Present a numbered list and return the item the operator picks.

    Invalid (non-numeric or out of range) answers re-prompt, up to
    `max_attempts` answers in total.

    Raises:
        PromptInputError: If input ends or no valid answer is given in time
    """
    if not items:
        raise ValueError(f"no {kind} to choose from")

    prompter.show(title)
    for n, item in enumerate(items, start=1):
        prompter.show(describe(n, item))

    for _ in range(max_attempts):
        answer = prompter.ask("Please enter your numeric choice: ")
        number = _parse_choice(answer)
        if number is not None and 1 <= number <= len(items):
            return items[number - 1]
        logger.debug(f"Invalid {kind} choice {answer!r}")
        prompter.show(
            f"Entered invalid {kind} number, must be in the range 1 to {len(items)}"
        )

    raise PromptInputError(f"no valid {kind} chosen after {max_attempts} attempts")


def _parse_choice(answer: str) -> Optional[int]:
    try:
        return int(answer.strip())
    except ValueError:
        return None
