import math
import re
from typing import List, Sequence, Tuple

STACK_SIZE = 64
MAX_QUANTITY = 2560

TERM_RE = re.compile(r"([0-9]+)([a-z]?)")


class QuantityError(ValueError):
    pass


def is_quantifier(token: str) -> bool:
    """True when the token starts with digits, e.g. ``4``, ``1m``, ``8m2d``."""
    return TERM_RE.match(str(token or "")) is not None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _term_value(digits: str, flag: str) -> int:
    amount = int(digits)
    if flag == "m":
        return amount * STACK_SIZE
    if flag == "d":
        return _round_half_up(float(STACK_SIZE) / max(1, amount))
    if flag == "s":
        return max(1, STACK_SIZE - amount)
    return amount


def parse_quantity(token: str) -> int:
    """Sum every digit[flag] term in the token, capped at MAX_QUANTITY.

    ``m`` multiplies by a stack, ``d`` divides a stack, ``s`` subtracts from
    a stack; any other flag is ignored and the digits count as-is.
    """
    text = str(token or "")
    if not is_quantifier(text):
        raise QuantityError(f"'{text}' is not a quantity.")
    total = sum(_term_value(digits, flag) for digits, flag in TERM_RE.findall(text))
    return min(MAX_QUANTITY, total)


def split_item_args(default: int, args: Sequence[str]) -> Tuple[str, int]:
    """Separate an item phrase from an optional trailing quantity.

    >>> split_item_args(1, ["flint", "and", "steel", "32"])
    ('flint and steel', 32)
    >>> split_item_args(1, ["4"])
    ('4', 1)
    """
    tokens: List[str] = [str(t) for t in args]
    if not tokens:
        raise QuantityError("An item name is required.")
    if len(tokens) == 1:
        return tokens[0], default
    if is_quantifier(tokens[-1]):
        return " ".join(tokens[:-1]), parse_quantity(tokens[-1])
    return " ".join(tokens), default
