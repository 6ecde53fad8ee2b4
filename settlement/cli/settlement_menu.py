from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from settlement.constants import KIND_LABELS, STATUS_LABELS, format_period
from settlement.due_dates import is_valid_period
from settlement.models import format_money
from settlement.models.batch import BatchSummary, OutcomeStatus
from settlement.services.bill_registry import BillRegistry
from settlement.services.settlement_service import SettlementService

console = Console()

OUTCOME_STYLES = {
    OutcomeStatus.CREATED: "green",
    OutcomeStatus.SKIPPED: "yellow",
    OutcomeStatus.FAILED: "red",
}


def _ask_period() -> str | None:
    while True:
        period = questionary.text("Settlement period (YYYY-MM, e.g. 2024-01):").ask()
        if period is None:
            return None
        if is_valid_period(period):
            return period
        console.print("[red]Invalid format. Use YYYY-MM (e.g. 2024-01).[/red]")


def show_summary(summary: BatchSummary) -> None:
    table = Table(title=f"Settlement {format_period(summary.period)}")
    table.add_column("Counterparty")
    table.add_column("Outcome", justify="center")
    table.add_column("Reason")
    table.add_column("Net", justify="right")

    for outcome in summary.details:
        style = OUTCOME_STYLES[outcome.status]
        table.add_row(
            outcome.counterparty_name,
            f"[{style}]{outcome.status.value}[/{style}]",
            outcome.reason,
            format_money(outcome.net_amount) if outcome.status == OutcomeStatus.CREATED else "",
        )

    console.print(table)
    # Counts are printed even when zero so an empty run reads differently from no run.
    console.print(
        f"  Total: {summary.total}  Created: [green]{summary.created}[/green]  "
        f"Skipped: [yellow]{summary.skipped}[/yellow]  Failed: [red]{summary.failed}[/red]"
    )


def run_batch_menu(settlement_service: SettlementService, registry: BillRegistry) -> None:
    console.print()
    console.print("[bold]Generate Bills[/bold]", style="cyan")

    period = _ask_period()
    if period is None:
        return

    overwrite = False
    existing = registry.list_bills(period)
    if existing:
        console.print(f"  [yellow]{len(existing)} bill(s) already exist for {format_period(period)}.[/yellow]")
        overwrite = bool(questionary.confirm("Overwrite existing bills?", default=False).ask())

    summary = settlement_service.run_batch(period, overwrite=overwrite)
    console.print()
    show_summary(summary)


def list_bills_menu(registry: BillRegistry) -> None:
    period = _ask_period()
    if period is None:
        return

    bills = registry.list_bills(period)
    if not bills:
        console.print("[yellow]No bills for this period.[/yellow]")
        return

    table = Table(title=f"Bills {format_period(period)}")
    table.add_column("Counterparty")
    table.add_column("Kind")
    table.add_column("Status", justify="center")
    table.add_column("Gross", justify="right")
    table.add_column("Rebate", justify="right")
    table.add_column("Net", justify="right")
    table.add_column("Due")
    table.add_column("Rebate due")

    for bill in bills:
        table.add_row(
            bill.counterparty_name,
            KIND_LABELS.get(bill.kind, bill.kind.value),
            STATUS_LABELS.get(bill.status, bill.status.value),
            format_money(bill.gross_amount, bill.currency),
            format_money(bill.rebate_amount, bill.currency),
            format_money(bill.net_amount, bill.currency),
            bill.payment_due_date.isoformat() if bill.payment_due_date else "-",
            bill.rebate_due_date.isoformat() if bill.rebate_due_date else "-",
        )

    console.print(table)
