"""Output helpers separating user-facing text from machine-readable results.

user_output() writes to stderr so that stdout stays parseable; the codespace
name printed by `cslaunch create` is the only thing that goes to stdout.
"""

import click


def user_output(message: str = "", *, nl: bool = True) -> None:
    """Write a message for humans to stderr."""
    click.echo(message, nl=nl, err=True)


def machine_output(message: str = "", *, nl: bool = True) -> None:
    """Write a result for scripts to stdout."""
    click.echo(message, nl=nl)
