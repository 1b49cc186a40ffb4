"""Amounts are stored as integers in the currency's minor unit (yen for JPY, cents for USD)."""

# Currencies without a minor unit, as listed by Stripe and PayPal
ZERO_DECIMAL_CURRENCIES = frozenset({
    "BIF", "CLP", "DJF", "GNF", "HUF", "JPY", "KMF", "KRW", "MGA",
    "PYG", "RWF", "TWD", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
})


def is_zero_decimal(currency: str) -> bool:
    return (currency or "").upper() in ZERO_DECIMAL_CURRENCIES


def to_major_units_string(amount: int, currency: str) -> str:
    """Format a minor-unit amount the way PayPal expects: "12.34", or "1200" for JPY."""
    if is_zero_decimal(currency):
        return str(int(amount))
    return f"{int(amount) // 100}.{int(amount) % 100:02d}"
