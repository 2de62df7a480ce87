"""Fake Chooser for testing."""

from dataclasses import dataclass

from cslaunch.gateway.chooser.abc import Chooser


@dataclass(frozen=True)
class ChoicePrompt:
    """Record of a choose() call for test assertions."""

    message: str
    options: list[str]
    default: str | None


class FakeChooser(Chooser):
    """Chooser that answers from a scripted list.

    Each answer is either an option string (matched exactly) for choose(), or
    free text for prompt_text(). Answers are consumed in order.
    """

    def __init__(self, *, interactive: bool = True, answers: list[str] | None = None) -> None:
        self._interactive = interactive
        self._answers = list(answers or [])
        self._prompts: list[ChoicePrompt] = []
        self._text_prompts: list[str] = []

    def can_prompt(self) -> bool:
        return self._interactive

    def choose(self, message: str, options: list[str], *, default: str | None) -> str:
        if not self._interactive:
            raise RuntimeError("FakeChooser.choose called while not interactive")
        self._prompts.append(ChoicePrompt(message=message, options=list(options), default=default))
        if not self._answers:
            if default is None:
                raise RuntimeError(f"FakeChooser has no answer for {message!r}")
            return default
        answer = self._answers.pop(0)
        if answer not in options:
            raise RuntimeError(f"FakeChooser answer {answer!r} is not among {options}")
        return answer

    def prompt_text(self, message: str) -> str:
        if not self._interactive:
            raise RuntimeError("FakeChooser.prompt_text called while not interactive")
        self._text_prompts.append(message)
        if not self._answers:
            raise RuntimeError(f"FakeChooser has no answer for {message!r}")
        return self._answers.pop(0)

    @property
    def prompts(self) -> list[ChoicePrompt]:
        """choose() calls, for test assertions."""
        return self._prompts.copy()

    @property
    def text_prompts(self) -> list[str]:
        """prompt_text() messages, for test assertions."""
        return self._text_prompts.copy()
