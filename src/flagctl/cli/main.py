import typer

from flagctl.cli.bulk_cmd import bulk as bulk_command
from flagctl.cli.doctor import doctor as doctor_command
from flagctl.cli.flag_cmd import flag as flag_command
from flagctl.cli.projects_cmd import projects as projects_command
from flagctl.config.logging import configure_logging

app = typer.Typer(name="flagctl", help="Feature flag branch and pull request automation")
app.command(name="flag")(flag_command)
app.command(name="bulk")(bulk_command)
app.command(name="projects")(projects_command)
app.command(name="doctor")(doctor_command)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


if __name__ == "__main__":
    app()
