import pytest

from services import quantity


@pytest.mark.parametrize(
    "token, expected",
    [
        ("1", 1),
        ("64", 64),
        ("1m", 64),
        ("2d", 32),
        ("3d", 21),
        ("0d", 64),
        ("34s", 30),
        ("70s", 1),
        ("8m2d", 544),
        ("5x", 5),
        ("100m", 2560),
    ],
)
def test_parse_quantity(token, expected):
    assert quantity.parse_quantity(token) == expected


def test_divisor_rounds_half_up():
    # 64 / 128 = 0.5
    assert quantity.parse_quantity("128d") == 1


def test_is_quantifier():
    assert quantity.is_quantifier("1")
    assert quantity.is_quantifier("1m")
    assert quantity.is_quantifier("8m2d")
    assert not quantity.is_quantifier("x")
    assert not quantity.is_quantifier("steel")
    assert not quantity.is_quantifier("")


def test_parse_quantity_rejects_words():
    with pytest.raises(quantity.QuantityError):
        quantity.parse_quantity("steel")


def test_split_single_token_uses_default():
    assert quantity.split_item_args(1, ["4"]) == ("4", 1)
    assert quantity.split_item_args(30, ["arrow"]) == ("arrow", 30)


def test_split_strips_trailing_quantifier():
    assert quantity.split_item_args(1, ["flint", "and", "steel", "32"]) == ("flint and steel", 32)
    assert quantity.split_item_args(1, ["cobblestone", "9m"]) == ("cobblestone", 576)
    assert quantity.split_item_args(1, ["4", "1"]) == ("4", 1)


def test_split_keeps_non_quantifier_tail():
    assert quantity.split_item_args(1, ["flint", "and", "steel"]) == ("flint and steel", 1)


def test_split_requires_tokens():
    with pytest.raises(quantity.QuantityError):
        quantity.split_item_args(1, [])
