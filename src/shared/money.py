"""Amount conversion and display helpers."""

from decimal import ROUND_HALF_UP, Decimal

# Currencies the payment processor reports in major units already
ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "bif",
        "clp",
        "djf",
        "gnf",
        "jpy",
        "kmf",
        "krw",
        "mga",
        "pyg",
        "rwf",
        "ugx",
        "vnd",
        "vuv",
        "xaf",
        "xof",
        "xpf",
    }
)


def round_half_up(value: float | int) -> int:
    """Round to the nearest whole unit, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def minor_to_major(amount: int | float | None, currency: str | None = None) -> float | None:
    """Convert a processor amount in minor units (cents) to major units."""
    if amount is None:
        return None
    if currency and currency.lower() in ZERO_DECIMAL_CURRENCIES:
        return float(round_half_up(amount))
    return round_half_up(amount) / 100


def format_amount(amount: float | int | None, label: str = "Rs") -> str:
    """Render an amount the way receipts and emails print it: ``Rs 2,500``."""
    return f"{label} {round_half_up(amount or 0):,}"
