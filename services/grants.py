from typing import List

from services.quantity import MAX_QUANTITY, STACK_SIZE


def give_line(user: str, item: str, quantity: int) -> str:
    return f"give {user} {item} {quantity}"


def build_grant_lines(user: str, item: str, quantity: int) -> List[str]:
    """Console give statements for a quantity, split into full stacks.

    Anything up to one stack is a single statement. Larger amounts are capped
    at MAX_QUANTITY and emitted as full stacks followed by the remainder.
    """
    if quantity <= STACK_SIZE:
        return [give_line(user, item, quantity)]

    quantity = min(quantity, MAX_QUANTITY)
    full_stacks, remainder = divmod(quantity, STACK_SIZE)
    lines = [give_line(user, item, STACK_SIZE) for _ in range(full_stacks)]
    if remainder > 0:
        lines.append(give_line(user, item, remainder))
    return lines
