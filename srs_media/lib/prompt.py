from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class Prompter(Protocol):
    def choose(self, title: str, options: Sequence[str], default_index: Optional[int] = 0) -> int:
        ...

    def ask(self, question: str) -> str:
        ...

    def show(self, message: str) -> None:
        ...


class ConsolePrompter:
    """Numbered-list and free-text prompts on the controlling terminal."""

    def __init__(
        self,
        *,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self._input = input_fn
        self._output = output_fn

    def choose(self, title: str, options: Sequence[str], default_index: Optional[int] = 0) -> int:
        """Return the 0-based index of the option the operator picked."""

        if not options:
            raise ValueError(f"No options to choose from for {title!r}")

        while True:
            self._output(title)
            for i, opt in enumerate(options, start=1):
                marker = " (default)" if default_index is not None and i - 1 == default_index else ""
                self._output(f"  {i}: {opt}{marker}")

            answer = self._input("Selection: ").strip()
            if not answer and default_index is not None:
                choice = default_index
            elif answer.isdigit() and 1 <= int(answer) <= len(options):
                choice = int(answer) - 1
            else:
                self._output(f"Enter a number between 1 and {len(options)}.")
                continue

            logger.info("%s -> %s", title, options[choice])
            return choice

    def ask(self, question: str) -> str:
        return self._input(f"{question} ").strip()

    def show(self, message: str) -> None:
        self._output(message)


def confirm(prompter: Prompter, question: str, expected: str) -> bool:
    """True iff the operator types ``expected`` exactly (case-insensitive)."""
    return prompter.ask(question).lower() == expected.lower()
