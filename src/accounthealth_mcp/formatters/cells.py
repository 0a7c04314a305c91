"""Cell formatting shared by the text blocks."""

import math


def sanitize_cell(value: object) -> str:
    """Make a value safe for a single table cell or line.

    Pipes become slashes and line breaks become spaces.
    """
    text = str(value).replace("|", "/")
    return " ".join(text.split())


def fixed(value: float, decimals: int = 2) -> str:
    """Fixed-point formatting; non-finite values render as 0."""
    if not math.isfinite(value):
        value = 0.0
    return f"{value:.{decimals}f}"


def money(value: float, currency_symbol: str) -> str:
    return f"{currency_symbol}{fixed(value)}"
