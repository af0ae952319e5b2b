"""Locale-aware money formatting.

en-IN groups the last three digits, then pairs (1,23,45,678.00); en-US
groups in thousands (12,345,678.00). Always two decimal places.
"""

from pricing.currency.snapshot import Currency


def _group_thousands(digits: str) -> str:
    return f"{int(digits):,}"


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs) + "," + tail


def format_amount(amount: float, currency: Currency) -> str:
    sign = "-" if amount < 0 else ""
    whole, fraction = f"{abs(amount):.2f}".split(".")

    if currency.locale == "en-IN":
        grouped = _group_indian(whole)
    else:
        grouped = _group_thousands(whole)

    return f"{sign}{currency.symbol}{grouped}.{fraction}"
