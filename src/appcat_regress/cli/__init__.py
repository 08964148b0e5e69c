"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="appcat-regress",
    help="AppCat regression harness - compare analyzer findings against baselines",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


# Import subcommands to register them
from .run import run as _run  # noqa: F401, E402
from .diff import diff_cmd as _diff  # noqa: F401, E402
from .parse import parse as _parse  # noqa: F401, E402
from .baseline import baseline as _baseline  # noqa: F401, E402


def main() -> None:
    app()
