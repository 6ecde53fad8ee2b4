import questionary
from rich.console import Console

from settlement.cli.account_menu import account_balances_menu
from settlement.cli.settlement_menu import list_bills_menu, run_batch_menu
from settlement.repositories.factory import (
    get_account_repository,
    get_bill_repository,
    get_counterparty_repository,
    get_raw_record_repository,
)
from settlement.services.bill_registry import BillRegistry
from settlement.services.ledger_service import LedgerService
from settlement.services.settlement_service import SettlementService

console = Console()


def _build_services() -> tuple[SettlementService, BillRegistry, LedgerService]:
    registry = BillRegistry(get_bill_repository())
    settlement_service = SettlementService(
        get_counterparty_repository(),
        get_raw_record_repository(),
        registry,
    )
    return settlement_service, registry, LedgerService(get_account_repository())


def main_menu() -> None:
    settlement_service, registry, ledger_service = _build_services()

    console.print()
    console.print("[bold]Settlement[/bold]", style="cyan")
    console.print()

    while True:
        choice = questionary.select(
            "Main menu",
            choices=[
                "Generate bills for a period",
                "List bills",
                "Account balances",
                "Exit",
            ],
        ).ask()

        if choice is None or choice == "Exit":
            console.print("[bold]Bye![/bold]")
            break
        elif choice == "Generate bills for a period":
            run_batch_menu(settlement_service, registry)
        elif choice == "List bills":
            list_bills_menu(registry)
        elif choice == "Account balances":
            account_balances_menu(ledger_service)
