"""Template rendering for scheduled reports and dispatches."""

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Mapping, Union

PLACEHOLDER_RE = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}")


def round_half_up(value, places: int = 2) -> Decimal:
    """
    Round the exact binary value of ``value`` to ``places`` decimals, ties away from zero.

    0.125 -> 0.13, while 1.005 (stored as 1.00499...) -> 1.00.
    """
    return Decimal(float(value or 0)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _group_thousands(digits: str) -> str:
    """Group an unsigned digit string with pt-BR thousands separators."""
    return f"{int(digits):,}".replace(",", ".")


def format_count(value) -> str:
    """Integer count with pt-BR thousands separator: 12345 -> '12.345'."""
    number = int(round_half_up(value, 0))
    sign = "-" if number < 0 else ""
    return f"{sign}{_group_thousands(str(abs(number)))}"


def format_decimal(value, places: int = 2) -> str:
    """Fixed-point number in pt-BR notation: 1234.5 -> '1.234,50'."""
    number = round_half_up(value, places)
    sign = "-" if number < 0 else ""
    whole, _, fraction = f"{abs(number):.{places}f}".partition(".")
    text = _group_thousands(whole)
    return f"{sign}{text},{fraction}" if places else f"{sign}{text}"


def format_currency(value, symbol: str = "R$") -> str:
    """Currency with two decimals: 12.5 -> 'R$ 12,50'."""
    formatted = format_decimal(value)
    if formatted.startswith("-"):
        return f"-{symbol} {formatted[1:]}"
    return f"{symbol} {formatted}"


def format_ratio(value) -> str:
    """Ratio with trailing multiplier: 3.456 -> '3.46x'."""
    return f"{round_half_up(value):.2f}x"


def format_percent(value) -> str:
    """Percentage value (already scaled to 0-100): 12.346 -> '12.35%'."""
    return f"{round_half_up(value):.2f}%"


@dataclass(frozen=True)
class Count:
    value: float


@dataclass(frozen=True)
class Currency:
    value: float


@dataclass(frozen=True)
class Ratio:
    value: float


@dataclass(frozen=True)
class Percent:
    value: float


TemplateValue = Union[str, int, float, Count, Currency, Ratio, Percent]

_KIND_FORMATTERS: Dict[type, Callable] = {
    Count: format_count,
    Currency: format_currency,
    Ratio: format_ratio,
    Percent: format_percent,
}

# Placeholders understood by the report composer and how raw numbers for them
# are formatted.
REPORT_PLACEHOLDERS: Dict[str, Callable] = {
    "leads": format_count,
    "conversions": format_count,
    "clicks": format_count,
    "impressions": format_count,
    "revenue": format_currency,
    "investment": format_currency,
    "spend": format_currency,
    "cpl": format_currency,
    "roas": format_ratio,
    "conversion_rate": format_percent,
    "ctr": format_percent,
    "client_nome": str,
    "period": str,
}


def format_value(name: str, value: TemplateValue) -> str:
    """Format a single placeholder value."""
    formatter = _KIND_FORMATTERS.get(type(value))
    if formatter:
        return formatter(value.value)
    if isinstance(value, str):
        return value
    known = REPORT_PLACEHOLDERS.get(name)
    if known:
        return known(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return format_count(value)
    if isinstance(value, float):
        return format_decimal(value)
    return str(value)


def render(template: str, values: Mapping[str, TemplateValue]) -> str:
    """
    Substitute ``{{name}}`` tokens in ``template``.

    Unknown placeholders are left verbatim so partially configured templates
    still render. Rendering is pure.
    """

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in values or values[name] is None:
            return match.group(0)
        return format_value(name, values[name])

    return PLACEHOLDER_RE.sub(replace, template or "")


def placeholders(template: str) -> list:
    """Placeholder names used in ``template``, in order of first appearance."""
    seen = []
    for name in PLACEHOLDER_RE.findall(template or ""):
        if name not in seen:
            seen.append(name)
    return seen
