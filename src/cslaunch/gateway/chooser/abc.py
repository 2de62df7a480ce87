"""Abstract interactive chooser used to resolve ambiguous input."""

from abc import ABC, abstractmethod


class Chooser(ABC):
    """Asks the user to pick or type a value.

    Callers must check can_prompt() first; prompting without a terminal is a
    programming error.
    """

    @abstractmethod
    def can_prompt(self) -> bool:
        """Whether questions can be asked in this session."""
        ...

    @abstractmethod
    def choose(self, message: str, options: list[str], *, default: str | None) -> str:
        """Ask the user to pick one of the options.

        Args:
            message: Question shown above the options
            options: Choices in display order (non-empty)
            default: Preselected option, or None

        Returns:
            The chosen option, exactly as given in options
        """
        ...

    @abstractmethod
    def prompt_text(self, message: str) -> str:
        """Ask the user for free text."""
        ...
