import logging
from pathlib import Path

import click

from cslaunch.cli.commands.create_cmd import create_cmd
from cslaunch.core.context import create_context
from cslaunch.core.errors import CodespaceError
from cslaunch.output.output import user_output

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="cslaunch")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="CSLAUNCH_CONFIG_DIR",
    help="Directory holding config.toml (default: ~/.cslaunch).",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, config_dir: Path | None) -> None:
    """Create GitHub codespaces and connect to them."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        try:
            ctx.obj = create_context(config_dir=config_dir)
        except CodespaceError as e:
            user_output(click.style("Error: ", fg="red") + str(e))
            raise SystemExit(1) from None


cli.add_command(create_cmd)


def main() -> None:
    """CLI entry point used by the `cslaunch` console script."""
    cli()
