"""Console rendering of a reconciliation session with rich."""

from decimal import Decimal
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ledger_reconciler.config import OutputConfig
from ledger_reconciler.session import ReconciliationSession
from ledger_reconciler.utils.decimal_utils import format_currency, is_effectively_zero

# Rows of the unmatched table shown before truncating
MAX_UNMATCHED_ROWS = 50


def _money(amount: Decimal, output: OutputConfig) -> str:
    text = format_currency(amount, output.decimal_places, output.currency_symbol)
    if is_effectively_zero(amount):
        return f"[green]{text}[/green]"
    if amount < 0:
        return f"[red]{text}[/red]"
    return text


def build_summary_table(session: ReconciliationSession, output: Optional[OutputConfig] = None) -> Table:
    """Table with both totals and their difference.

    A difference below half a cent is shown as a balanced zero.
    """
    output = output or session.config.output
    summary = session.balance_summary

    table = Table(title=f"Balance ({session.filter_mode.value})")
    table.add_column("Ledger")
    table.add_column("Total", justify="right")

    table.add_row("Bank", _money(summary.bank_total, output))
    table.add_row("Bookkeeping", _money(summary.other_total, output))
    status = "[green]balanced[/green]" if summary.is_balanced else "[yellow]difference[/yellow]"
    table.add_row(f"Difference ({status})", _money(summary.difference, output))
    return table


def build_unmatched_table(
    session: ReconciliationSession,
    output: Optional[OutputConfig] = None,
    limit: int = MAX_UNMATCHED_ROWS,
) -> Table:
    """Table of the unmatched-combined view, truncated to ``limit`` rows."""
    output = output or session.config.output
    entries = session.unmatched_combined

    table = Table(title=f"Unmatched entries ({len(entries)})")
    table.add_column("Date")
    table.add_column("Source")
    table.add_column("Description", overflow="fold")
    table.add_column("Amount", justify="right")

    for entry in entries[:limit]:
        table.add_row(
            entry.date.strftime(output.date_format),
            entry.source.value,
            escape(entry.description),
            _money(entry.amount, output),
        )
    if len(entries) > limit:
        table.add_row("...", "", f"and {len(entries) - limit} more", "")
    return table


def render_summary(session: ReconciliationSession, console: Optional[Console] = None) -> None:
    """Print the balance summary, match counts and unmatched entries.

    Args:
        session: Session to render.
        console: Rich console (a new stdout console if None).
    """
    console = console or Console()

    console.print(build_summary_table(session))

    discrepancies = session.registry.discrepancies
    console.print(
        f"\n[bold]Match groups:[/bold] {len(session.match_groups)}"
        f"  [bold]Discrepancies:[/bold] {len(discrepancies)}"
    )
    for group in discrepancies[:10]:
        console.print(
            f"  [yellow]{group.id}[/yellow]: bank {group.bank_sum_in_match} "
            f"vs bookkeeping {group.other_sum_in_match}"
        )

    if session.all_matched:
        console.print("\n[green]All entries are matched.[/green]")
    else:
        console.print(build_unmatched_table(session))
