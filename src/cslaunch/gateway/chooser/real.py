"""Interactive chooser using click prompts on stderr."""

import click

from cslaunch.gateway.chooser.abc import Chooser
from cslaunch.gateway.terminal.abc import Terminal


class ClickChooser(Chooser):
    """Numbered-menu chooser built on click.prompt."""

    def __init__(self, terminal: Terminal) -> None:
        self._terminal = terminal

    def can_prompt(self) -> bool:
        return self._terminal.can_prompt()

    def choose(self, message: str, options: list[str], *, default: str | None) -> str:
        click.echo(message, err=True)
        for index, option in enumerate(options, start=1):
            click.echo(f"  {index}. {option}", err=True)

        default_index = options.index(default) + 1 if default in options else None
        selected = click.prompt(
            "Select",
            type=click.IntRange(1, len(options)),
            default=default_index,
            err=True,
        )
        return options[selected - 1]

    def prompt_text(self, message: str) -> str:
        return click.prompt(message, err=True).strip()
