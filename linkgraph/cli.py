"""CLI entrypoint for linkgraph."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import load_config
from .errors import ConfigError


def _auto_detect_vault(start: Path) -> Path:
    """Find a ./content vault folder by walking up from `start`; fall back to `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if p.is_dir() and p.name.lower() == "content":
            return p
        candidate = p / "content"
        if candidate.is_dir():
            return candidate
    return cur


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@click.group()
@click.version_option(__version__, prog_name="linkgraph")
@click.option(
    "--vault",
    "-v",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Path to the vault directory (defaults to auto-detected ./content, else the current directory)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to a linkgraph.yml (defaults to <vault>/linkgraph.yml)",
)
@click.option("--verbose", is_flag=True, default=False, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, vault: Path | None, config_path: Path | None, verbose: bool) -> None:
    """linkgraph - Link graph engine for markdown vaults.

    Build the note graph, lay it out, and analyze its structure.
    """
    ctx.ensure_object(dict)
    _configure_logging(verbose)

    if vault is None:
        vault = _auto_detect_vault(Path.cwd())

    if not vault.exists() or not vault.is_dir():
        raise click.BadParameter(f"Directory '{vault}' does not exist.", param_hint="--vault / -v")

    try:
        config = load_config(vault, path=config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    ctx.obj["vault"] = vault.resolve()
    ctx.obj["config"] = config


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "md", "json"]),
    default="md",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option("--top", type=int, default=25, show_default=True, help="How many notes to show in top lists")
@click.pass_context
def graph(ctx: click.Context, fmt: str, out: Path | None, top: int) -> None:
    """Summarize the vault's link graph."""
    from .commands.graph_cmd import run_graph

    exit_code = run_graph(ctx.obj["vault"], config=ctx.obj["config"], fmt=fmt, out=out, top=top)
    sys.exit(exit_code)


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "svg"]),
    default="json",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option("--iterations", type=int, default=None, help="Simulation steps (default from config)")
@click.option("--width", type=float, default=None, help="Canvas width (default from config)")
@click.option("--height", type=float, default=None, help="Canvas height (default from config)")
@click.option("--seed", type=int, default=None, help="Seed for initial positions (default from config)")
@click.pass_context
def layout(
    ctx: click.Context,
    fmt: str,
    out: Path | None,
    iterations: int | None,
    width: float | None,
    height: float | None,
    seed: int | None,
) -> None:
    """Compute a force-directed layout of the vault graph."""
    from .commands.graph_cmd import run_layout

    exit_code = run_layout(
        ctx.obj["vault"],
        config=ctx.obj["config"],
        fmt=fmt,
        out=out,
        iterations=iterations,
        width=width,
        height=height,
        seed=seed,
    )
    sys.exit(exit_code)


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["md", "json"]),
    default="md",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option("--top", type=int, default=25, show_default=True, help="How many notes to list by degree")
@click.pass_context
def analyze(ctx: click.Context, fmt: str, out: Path | None, top: int) -> None:
    """Report density, degree and clustering metrics."""
    from .commands.graph_cmd import run_analyze

    sys.exit(run_analyze(ctx.obj["vault"], config=ctx.obj["config"], fmt=fmt, out=out, top=top))


@cli.command("communities")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["md", "json"]),
    default="md",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.pass_context
def communities(ctx: click.Context, fmt: str, out: Path | None) -> None:
    """Group notes into communities of linked notes."""
    from .commands.graph_cmd import run_communities

    sys.exit(run_communities(ctx.obj["vault"], config=ctx.obj["config"], fmt=fmt, out=out))


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["md", "json"]),
    default="md",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write output to a file")
@click.option("--top", type=int, default=25, show_default=True, help="How many notes to list")
@click.pass_context
def centrality(ctx: click.Context, fmt: str, out: Path | None, top: int) -> None:
    """Rank notes by centrality."""
    from .commands.graph_cmd import run_centrality

    sys.exit(run_centrality(ctx.obj["vault"], config=ctx.obj["config"], fmt=fmt, out=out, top=top))


@cli.command()
@click.argument("source")
@click.argument("target")
@click.pass_context
def path(ctx: click.Context, source: str, target: str) -> None:
    """Show the shortest link path from SOURCE to TARGET."""
    from .commands.graph_cmd import run_path

    sys.exit(run_path(ctx.obj["vault"], source, target, config=ctx.obj["config"]))


@cli.command()
def serve() -> None:
    """Answer JSON-lines engine requests on stdin/stdout.

    \b
    Each line is a request:
        {"type": "ANALYZE_NETWORK", "payload": {"nodes": [...], "edges": [...]}, "id": "1"}
    and gets one response line carrying the same id.
    """
    from .commands.graph_cmd import run_serve

    sys.exit(run_serve(click.get_text_stream("stdin"), click.get_text_stream("stdout")))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
