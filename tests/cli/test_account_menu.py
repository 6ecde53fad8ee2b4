from unittest.mock import MagicMock, patch

from settlement.models.account import GlobalStats


class TestAccountBalancesMenu:
    @patch("settlement.cli.account_menu.console")
    def test_prints_problems_and_total(self, mock_console):
        from settlement.cli.account_menu import account_balances_menu

        mock_service = MagicMock()
        mock_service.validate.return_value = ["virtual account 'X' has no parent"]
        mock_service.stats.return_value = GlobalStats(
            total_reference=875000, totals_by_currency={"USD": 80000, "CNY": 75000}, primary_count=2
        )

        account_balances_menu(mock_service)

        printed = [str(call.args[0]) for call in mock_console.print.call_args_list if call.args]
        assert any("has no parent" in line for line in printed)
        assert any("Total assets: CNY 8,750.00" in line for line in printed)
