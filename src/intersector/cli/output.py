"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from intersector.domain import IntersectionResult, Point
from intersector.utils import BatchStats

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar for batch runs.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Intersector[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator."""
    console.print(f"\n{SYM_STEP} {message}")


def _format_point(point: Point) -> str:
    return f"({point.x:.9g}, {point.y:.9g})"


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_roots(roots: list[float], degree: int) -> None:
    """Print the real roots of a polynomial.

    Args:
        roots: Roots in ascending order
        degree: Degree of the simplified polynomial
    """
    console.print(f"  degree {degree} {SYM_DOT} [green]{len(roots)}[/green] real roots")
    for root in roots:
        console.print(f"  {root:.12g}")


def print_result(result: IntersectionResult) -> None:
    """Print an intersection result as a status line plus a point table."""
    if not result.supported:
        console.print(f"  [yellow]{SYM_ERR} unsupported shape pair[/yellow]")
    console.print(f"  [bold]{result.status.value}[/bold] {SYM_DOT} {len(result.points)} points")
    if result.points:
        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("#", justify="right")
        table.add_column("x", justify="right")
        table.add_column("y", justify="right")
        for index, point in enumerate(result.points, start=1):
            table.add_row(str(index), f"{point.x:.12g}", f"{point.y:.12g}")
        console.print(table)


def print_closest(point: Point, t: float, distance: float) -> None:
    """Print the nearest point on a curve."""
    console.print(f"  point    {_format_point(point)}")
    console.print(f"  t        {t:.12g}")
    console.print(f"  distance {distance:.12g}")


def print_batch_summary(stats: BatchStats, output_path: str | None = None) -> None:
    """Print batch success message with summary.

    Args:
        stats: Statistics of the finished run
        output_path: Where results were written, if anywhere
    """
    console.print(
        f"\n[bold green]{SYM_OK} Complete[/bold green] in {_format_time(stats.duration_seconds)}"
    )
    if output_path:
        line = Text("  ")
        line.append(output_path, style="bold")
        console.print(line)

    error_style = "red" if stats.error_count > 0 else "green"
    console.print(
        f"  {stats.processed_count} pairs {SYM_DOT} {stats.intersection_count} intersecting "
        f"{SYM_DOT} {stats.point_count} points {SYM_DOT} "
        f"[{error_style}]{stats.error_count} errors[/{error_style}]"
    )
    if stats.pair_timings_ms:
        console.print(f"  {stats.mean_pair_ms:.2f}ms avg per pair")
    for pair_id, message in stats.errors[:10]:
        console.print(f"  [red]{SYM_ERR}[/red] {pair_id}: {message}")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_summary(processed: int, cancelled: int) -> None:
    """Print cancellation summary.

    Args:
        processed: Number of pairs finished before cancellation
        cancelled: Number of pending pairs that were cancelled
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {processed} pairs completed {SYM_DOT} {cancelled} pairs cancelled")
    console.print("  No output file created")
