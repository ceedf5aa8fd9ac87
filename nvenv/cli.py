import sys
from pathlib import Path
from typing import Optional

import typer

from nvenv.config import EnvConfig
from nvenv.env.builder import create_environment
from nvenv.errors import NvenvError
from nvenv.logger import setup_logger


app = typer.Typer(
    name="nvenv",
    help="nvenv: Python venv-like Node.js environments",
    add_completion=False,
)

EPILOG = (
    "After creating the environment, activate it with: "
    "source <path>/bin/activate (run 'deactivate' to leave it)."
)


@app.command(epilog=EPILOG)
def create(
    path: Path = typer.Argument(
        ...,
        help="Path where the environment is created",
    ),
    node: str = typer.Option(
        ...,
        "--node",
        help="Node.js version to install (e.g. 18.20.0 or v18.20.0)",
    ),
    silent: bool = typer.Option(
        False,
        "--silent",
        "-s",
        help="Suppress progress output (also NVENV_SILENT=1)",
    ),
    mirror: Optional[str] = typer.Option(
        None,
        "--mirror",
        help="Download base URL (default https://nodejs.org/dist, also NVENV_MIRROR)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
):
    """Create a Node.js environment at PATH."""

    try:
        config = EnvConfig.from_env(
            version=node,
            env_path=path,
            silent=True if silent else None,
            mirror=mirror,
        )
        setup_logger(verbose=verbose, silent=config.silent)

        result = create_environment(config)

        if not config.silent:
            typer.secho(
                "\nEnvironment created successfully!",
                fg=typer.colors.GREEN,
            )
            typer.echo("\nTo activate the environment, run:")
            typer.echo(f"  source {result.layout.activate_script}")

    except NvenvError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        sys.exit(exc.exit_code)

    except Exception:
        typer.secho(
            "Internal error occurred. Run with --verbose for details.",
            fg=typer.colors.RED,
            err=True,
        )
        raise


def run_cli() -> None:
    app()


if __name__ == "__main__":
    run_cli()
