"""Amount expressions typed by staff: "70+69+56", "70, 69, 56"."""
import re
from decimal import Decimal, InvalidOperation
from typing import List

from cointrace.core.errors import ParseError

# Plain ASCII decimal numbers, optionally with an exponent ("70", "12.5", ".5", "1e3").
_AMOUNT_RE = re.compile(r"-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# Capacity of an unconstrained PostgreSQL NUMERIC column.
NUMERIC_MAX_INTEGER_DIGITS = 131072
NUMERIC_MAX_SCALE = 16383

EMPTY_EXPRESSION_MESSAGE = "Please enter amounts like 70+69+56"


def split_expression(raw: str) -> List[str]:
    """Commas count as "+"; surrounding whitespace and empty tokens are dropped."""
    parts = (raw or "").replace(",", "+").split("+")
    return [p.strip() for p in parts if p.strip()]


def _fits_column(value: Decimal) -> bool:
    return (
        value.adjusted() < NUMERIC_MAX_INTEGER_DIGITS
        and -value.as_tuple().exponent <= NUMERIC_MAX_SCALE
    )


def parse_amount(token: str) -> Decimal:
    """The token's exact value; it is never rounded."""
    if not _AMOUNT_RE.fullmatch(token):
        raise ParseError(token)
    try:
        value = Decimal(token)
    except InvalidOperation:
        raise ParseError(token)
    if value <= 0 or not _fits_column(value):
        raise ParseError(token)
    return value


def parse_expression(raw: str) -> List[Decimal]:
    """
    Parse an amount expression into positive amounts.

    Any bad token fails the whole expression with ParseError naming it; an
    expression with no tokens at all fails with ParseError(token=None).
    """
    tokens = split_expression(raw)
    if not tokens:
        raise ParseError(None, EMPTY_EXPRESSION_MESSAGE)
    return [parse_amount(t) for t in tokens]
