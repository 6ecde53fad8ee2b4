from zoneinfo import ZoneInfo

from settlement.models.bill import BillKind, BillStatus

SHANGHAI_TZ = ZoneInfo("Asia/Shanghai")

# Legacy data labels the same currency two ways.
CURRENCY_ALIASES = {"RMB": "CNY"}

KIND_LABELS = {
    BillKind.PAYABLE_AGENCY: "Agency (ad spend)",
    BillKind.PAYABLE_SUPPLIER: "Supplier (tail payments)",
}

STATUS_LABELS = {
    BillStatus.DRAFT: "Draft",
    BillStatus.PENDING_REVIEW: "Pending review",
    BillStatus.APPROVED: "Approved",
    BillStatus.PAID: "Paid",
}

MONTHS_EN = {
    "01": "January",
    "02": "February",
    "03": "March",
    "04": "April",
    "05": "May",
    "06": "June",
    "07": "July",
    "08": "August",
    "09": "September",
    "10": "October",
    "11": "November",
    "12": "December",
}


def format_period(ref: str) -> str:
    if not ref or "-" not in ref:
        return ref or ""
    year, month = ref.split("-")
    return f"{MONTHS_EN.get(month, month)} {year}"
