"""CLI application entry point for intersector.

This module provides the main CLI interface using Typer.

Coefficients and coordinates may be negative; separate them from the
options with ``--``, as in ``intersector roots -- 1 0 -4``.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.markup import escape

from intersector import __version__
from intersector.cli.output import (
    console,
    create_progress,
    print_batch_summary,
    print_cancellation_summary,
    print_closest,
    print_error,
    print_header,
    print_result,
    print_roots,
    print_step,
)
from intersector.config import BatchConfig, IntersectorSettings, LoggingConfig, ToleranceConfig
from intersector.core import BatchIntersector, ClosestPointSolver, Polynomial, intersect
from intersector.domain import Bezier2, Bezier3, Point, shape_from_dict
from intersector.exceptions import BatchCancelledError, IntersectorError, ShapeError
from intersector.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="intersector",
    help="Find where planar shapes meet, polynomial roots, and nearest points on curves.",
    add_completion=False,
    no_args_is_help=True,
)


@dataclass
class CliState:
    """Options shared by every command."""

    log_file: Path | None = None
    log_level: str = "WARNING"
    quiet: bool = False


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Intersector[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_options(
    ctx: typer.Context,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Intersector command-line tools."""
    ctx.obj = CliState(log_file=log_file, log_level=log_level.upper(), quiet=quiet)
    configure_logging(
        log_file=log_file,
        console_level=ctx.obj.log_level,
        quiet=quiet,
    )


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj if isinstance(ctx.obj, CliState) else CliState()


def _load_shape(text: str) -> Any:
    """Parse a shape from JSON text, or from a file when prefixed with ``@``."""
    if text.startswith("@"):
        text = Path(text[1:]).read_text(encoding="utf-8")
    return shape_from_dict(json.loads(text))


@app.command()
def roots(
    ctx: typer.Context,
    coefficients: Annotated[
        list[float],
        typer.Argument(
            help="Coefficients from highest to lowest degree",
            show_default=False,
        ),
    ],
    min_x: Annotated[
        float | None,
        typer.Option("--min", help="Lower bound; bisect within [min, max]"),
    ] = None,
    max_x: Annotated[
        float | None,
        typer.Option("--max", help="Upper bound; bisect within [min, max]"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print roots as a JSON list"),
    ] = False,
) -> None:
    """Find the real roots of a polynomial.

    Without bounds the closed-form solvers are used (degree 4 or less).
    With --min and --max, roots in the interval are isolated for any degree.

    Example:
        intersector roots -- 1 0 -4
    """
    state = _state(ctx)
    if (min_x is None) != (max_x is None):
        print_error("--min and --max must be given together")
        raise typer.Exit(code=1)

    poly = Polynomial(coefficients).simplify()
    if min_x is not None and max_x is not None:
        if min_x >= max_x:
            print_error(f"Empty interval: [{min_x}, {max_x}]")
            raise typer.Exit(code=1)
        found = poly.get_roots_in_interval(min_x, max_x)
    else:
        if poly.degree > 4:
            print_error(
                f"Degree {poly.degree} has no closed-form solver",
                details="Pass --min and --max to bisect within an interval.",
            )
            raise typer.Exit(code=1)
        found = sorted(poly.get_roots())

    if as_json:
        typer.echo(json.dumps(found))
        return
    if not state.quiet:
        print_header(__version__)
        print_step(f"Roots of {escape(repr(poly))}")
    print_roots(found, poly.degree)


@app.command(name="intersect")
def intersect_command(
    ctx: typer.Context,
    shape_a: Annotated[
        str,
        typer.Argument(help="First shape as JSON (or @file.json)", show_default=False),
    ],
    shape_b: Annotated[
        str,
        typer.Argument(help="Second shape as JSON (or @file.json)", show_default=False),
    ],
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail on shape pairs without a routine"),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the result as JSON"),
    ] = False,
) -> None:
    """Intersect two shapes.

    Example:
        intersector intersect '{"type": "Circle", "center": {"x": 0, "y": 0}, "radius": 1}'
        '{"type": "Circle", "center": {"x": 1, "y": 0}, "radius": 1}'
    """
    state = _state(ctx)
    try:
        a = _load_shape(shape_a)
        b = _load_shape(shape_b)
        result = intersect(a, b, ToleranceConfig(), strict=strict)
    except (json.JSONDecodeError, OSError) as e:
        print_error(f"Could not read shape: {e}")
        raise typer.Exit(code=1)
    except IntersectorError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.to_dict()))
        return
    if not state.quiet:
        print_header(__version__)
        print_step(f"{a.kind.value} x {b.kind.value}")
    print_result(result)


@app.command()
def closest(
    ctx: typer.Context,
    curve_json: Annotated[
        str,
        typer.Argument(help="Bezier2 or Bezier3 curve as JSON (or @file.json)", show_default=False),
    ],
    x: Annotated[float, typer.Argument(help="Query point x", show_default=False)],
    y: Annotated[float, typer.Argument(help="Query point y", show_default=False)],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the result as JSON"),
    ] = False,
) -> None:
    """Find the point of a Bezier curve nearest to (X, Y)."""
    state = _state(ctx)
    try:
        curve = _load_shape(curve_json)
    except (json.JSONDecodeError, OSError) as e:
        print_error(f"Could not read curve: {e}")
        raise typer.Exit(code=1)
    except ShapeError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    if not isinstance(curve, Bezier2 | Bezier3):
        print_error(f"Expected a Bezier2 or Bezier3 curve, got {curve.kind.value}")
        raise typer.Exit(code=1)

    point, t, distance = ClosestPointSolver(ToleranceConfig()).closest(curve, Point(x, y))

    if as_json:
        typer.echo(json.dumps({"point": point.to_dict(), "t": t, "distance": distance}))
        return
    if not state.quiet:
        print_header(__version__)
        print_step(f"Nearest point on {curve.kind.value}")
    print_closest(point, t, distance)


@app.command()
def batch(
    ctx: typer.Context,
    pairs_file: Annotated[
        Path,
        typer.Argument(
            help="JSON file with a list of {id, a, b} shape pairs",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write results as JSON to this file",
        ),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers (default: auto, 1 = serial)",
            min=1,
        ),
    ] = None,
) -> None:
    """Intersect many shape pairs in parallel."""
    state = _state(ctx)

    if not pairs_file.is_file():
        print_error(
            f"Input file not found: {pairs_file}",
            details=f"The file '{pairs_file}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    try:
        pairs = json.loads(pairs_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print_error(f"Could not parse {pairs_file}: {e}")
        raise typer.Exit(code=1)
    if not isinstance(pairs, list):
        print_error("Pairs file must contain a JSON list")
        raise typer.Exit(code=1)

    settings = IntersectorSettings(
        batch=BatchConfig(max_workers=workers),
        logging=LoggingConfig(
            log_file=state.log_file,
            log_level="ERROR" if state.quiet else state.log_level,
        ),
    )
    runner = BatchIntersector(settings)

    if not state.quiet:
        print_header(__version__)
        print_step(f"Intersecting {len(pairs)} pairs")

    try:
        if not state.quiet:
            with create_progress() as progress:
                task_id = progress.add_task(f"{len(pairs)} pairs", total=len(pairs))

                def update_progress(completed: int, *_: object) -> None:
                    progress.update(task_id, completed=completed)

                results, stats = runner.run(
                    pairs, max_workers=workers, progress_callback=update_progress
                )
        else:
            results, stats = runner.run(pairs, max_workers=workers)
    except BatchCancelledError as e:
        if not state.quiet:
            print_cancellation_summary(e.processed_count, e.pending_count)
        raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

    serialized = {pair_id: result.to_dict() for pair_id, result in results.items()}
    if output is not None:
        output.write_text(json.dumps(serialized, indent=2), encoding="utf-8")
    elif state.quiet:
        typer.echo(json.dumps(serialized))

    if not state.quiet:
        print_batch_summary(stats, str(output) if output else None)
    if stats.error_count:
        raise typer.Exit(code=2)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
