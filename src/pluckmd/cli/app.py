import typer

from pluckmd.cli.run import check, run

app = typer.Typer(
    name="pluckmd",
    help="pluckmd CLI: keep code snippets in markdown in sync with their sources.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("run")(run)
app.command("check")(check)


def main() -> None:
    app()
