import sys
from enum import StrEnum
from pathlib import Path
from typing import Optional

import typer

from appwrap.bundle.assembler import PackageAssembler
from appwrap.bundle.builder import create_builder
from appwrap.bundle.context import BuildOptions
from appwrap.config import AppConfig, DocStyle, load_config
from appwrap.errors import AppwrapError, ConfigPathNotFoundError
from appwrap.kinds import PackageKind
from appwrap.logger import setup_logger
from appwrap.meta.expander import MacroExpander
from appwrap.meta.macros import MacroTable
from appwrap.meta.templates import DESKTOP_TEMPLATE, METAINFO_TEMPLATE
from appwrap.version import __version__

CONF_SUFFIX = ".appwrap.conf"


class NewItem(StrEnum):
    CONF = "conf"
    DESKTOP = "desktop"
    META = "meta"


app = typer.Typer(
    name="appwrap",
    help="Appwrap: package published applications as AppImage, Flatpak, RPM, Deb, Setup or Zip",
    add_completion=False,
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
):

    setup_logger(verbose=verbose)
    ctx.obj = {"verbose": verbose}


def find_config(path: Optional[Path]) -> Path:
    if path is not None and not path.is_dir():
        return path

    directory = path or Path.cwd()
    found = sorted(directory.glob(f"*{CONF_SUFFIX}"))

    if len(found) == 1:
        return found[0]

    if not found:
        raise ConfigPathNotFoundError(f"No {CONF_SUFFIX} file found in {directory}")

    raise ConfigPathNotFoundError(
        f"Multiple {CONF_SUFFIX} files found in {directory}, specify one explicitly"
    )


@app.command()
def build(
    ctx: typer.Context,
    kind: PackageKind = typer.Option(
        ...,
        "--kind",
        "-k",
        case_sensitive=False,
        help="Package kind to build",
    ),
    conf: Optional[Path] = typer.Option(
        None,
        "--conf",
        "-c",
        help=f"Configuration file, or directory containing a single *{CONF_SUFFIX} file",
    ),
    runtime: Optional[str] = typer.Option(
        None,
        "--runtime",
        "-r",
        help="Runtime identifier, e.g. linux-x64 or win-x64 (defaults to the host)",
    ),
    arch: Optional[str] = typer.Option(
        None,
        "--arch",
        help="Explicit package architecture, overriding detection",
    ),
    build_target: str = typer.Option(
        "Release",
        "--build",
        "-b",
        help="Build configuration (Release or Debug)",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output filename or path, overriding the generated name",
    ),
    app_version: Optional[str] = typer.Option(
        None,
        "--app-version",
        help="Version and release of form VERSION[RELEASE], overriding the configuration",
    ),
    run: bool = typer.Option(
        False,
        "--run",
        help="Run the package after building, where supported",
    ),
    skip_publish: bool = typer.Option(
        False,
        "--skip-publish",
        help="Package the existing build tree without publishing",
    ),
    clean: bool = typer.Option(
        False,
        "--clean",
        help="Run 'dotnet clean' before publishing",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not prompt for confirmation",
    ),
):

    verbose = bool(ctx.obj and ctx.obj.get("verbose"))

    try:
        config = load_config(find_config(conf))

        options = BuildOptions(
            kind=kind,
            runtime=runtime,
            arch=arch,
            output=output,
            build_target=build_target,
            version_release=app_version,
            verbose=verbose,
            run=run,
            skip_publish=skip_publish,
            clean=clean,
        )

        assembler = PackageAssembler(config, options)
        typer.echo(assembler.describe(verbose=verbose))
        typer.echo()

        if not yes and not typer.confirm("Continue?", default=True):
            typer.echo("Cancelled")
            sys.exit(1)

        summary = assembler.assemble()

        typer.echo("Build complete!")
        typer.echo(f"Package created at: {summary.output_path}")

    except AppwrapError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        sys.exit(exc.exit_code)


@app.command()
def new(
    item: NewItem = typer.Argument(
        ...,
        case_sensitive=False,
        help="File to create: conf, desktop or meta",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path (defaults to a name in the current directory)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing file",
    ),
):

    try:
        if item is NewItem.CONF:
            path = output or Path.cwd() / f"app{CONF_SUFFIX}"
            content = AppConfig.example(path.absolute().parent).render(DocStyle.COMMENTS)
        elif item is NewItem.DESKTOP:
            path = output or Path.cwd() / "app.desktop"
            content = DESKTOP_TEMPLATE + "\n"
        else:
            path = output or Path.cwd() / "app.metainfo.xml"
            content = METAINFO_TEMPLATE + "\n"

        if path.exists() and not force:
            typer.secho(
                f"File already exists: {path} (use --force to overwrite)",
                fg=typer.colors.YELLOW,
                err=True,
            )
            sys.exit(1)

        path.write_text(content, encoding="utf-8")
        typer.echo(f"Created: {path}")

    except AppwrapError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        sys.exit(exc.exit_code)


@app.command()
def macros(
    kind: PackageKind = typer.Option(
        PackageKind.ZIP,
        "--kind",
        "-k",
        case_sensitive=False,
        help="Package kind used to resolve example values",
    ),
    conf: Optional[Path] = typer.Option(
        None,
        "--conf",
        "-c",
        help="Configuration file (example values are used when omitted)",
    ),
    runtime: Optional[str] = typer.Option(
        None,
        "--runtime",
        "-r",
        help="Runtime identifier used to resolve example values",
    ),
):

    try:
        config = load_config(conf) if conf else AppConfig.example(Path.cwd())
        builder = create_builder(kind, config, BuildOptions(kind=kind, runtime=runtime))
        expander = MacroExpander(MacroTable.build(builder))
        typer.echo(expander.describe(verbose=True))

    except AppwrapError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        sys.exit(exc.exit_code)


@app.command()
def reference():
    """Print the configuration reference."""

    typer.echo(AppConfig.example(Path.cwd()).render(DocStyle.REFERENCE))


@app.command()
def version():
    typer.echo(f"appwrap {__version__}")


def run_cli() -> None:
    app()


if __name__ == "__main__":
    run_cli()
