from rich.console import Console
from rich.table import Table

from settlement.models import format_money
from settlement.services.ledger_service import LedgerService
from settlement.settings import settings

console = Console()


def account_balances_menu(ledger_service: LedgerService) -> None:
    for problem in ledger_service.validate():
        console.print(f"[red]! {problem}[/red]")

    stats = ledger_service.stats()

    table = Table(title="Balances by currency")
    table.add_column("Currency")
    table.add_column("Total", justify="right")
    for currency, amount in sorted(stats.totals_by_currency.items()):
        table.add_row(currency, format_money(amount))

    console.print(table)
    console.print(
        f"  Accounts: {stats.primary_count} primary, {stats.virtual_count} virtual, "
        f"{stats.independent_count} independent"
    )
    console.print(f"  [bold]Total assets: {format_money(stats.total_reference, settings.reference_currency)}[/bold]")
