"""Error taxonomy of the settlement core.

Single-counterparty calls let these propagate; the batch runner turns them
into per-counterparty outcomes.
"""


class SettlementError(Exception):
    """Base class for every settlement failure."""


class NotFoundError(SettlementError):
    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class NoBillableActivityError(SettlementError):
    """Zero eligible records for the counterparty and period."""


class NothingOwedError(SettlementError):
    """Records exist but the net amount is not positive."""


class ConflictError(SettlementError):
    """An active bill already exists for (counterparty, period, kind)."""

    def __init__(self, key: tuple, existing_uuid: str = "") -> None:
        counterparty_id, period, kind = key
        kind_value = getattr(kind, "value", kind)
        super().__init__(f"active {kind_value} bill already exists for counterparty {counterparty_id} in {period}")
        self.key = key
        self.existing_uuid = existing_uuid


class MixedCurrencyError(SettlementError):
    def __init__(self, currencies: set[str], scope: str) -> None:
        listed = ", ".join(sorted(currencies))
        super().__init__(f"mixed currencies in {scope}: {listed}")
        self.currencies = currencies
        self.scope = scope


class InvalidPeriodError(SettlementError, ValueError):
    def __init__(self, period: object) -> None:
        super().__init__(f"invalid settlement period {period!r}, expected YYYY-MM")
        self.period = period


class InvalidTransitionError(SettlementError):
    pass
