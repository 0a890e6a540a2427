import pytest

from fieldbuddy.numeric import clamp, fmt_num, is_finite, round_half_up, to_fixed


@pytest.mark.parametrize("x,expected", [
    (1, True), (1.5, True), (float("nan"), False), (float("inf"), False),
    (None, False), (True, False), ("3", False),
])
def test_is_finite(x, expected):
    assert is_finite(x) is expected


@pytest.mark.parametrize("x,expected", [(2.5, 3), (-2.5, -2), (2.4999, 2), (0.5, 1), (-0.6, -1)])
def test_round_half_up(x, expected):
    assert round_half_up(x) == expected


def test_to_fixed_uses_the_stored_binary_value():
    assert to_fixed(1.005, 2) == 1.0     # stored as 1.00499999...
    assert to_fixed(0.125, 2) == 0.13    # exactly representable: half rounds away
    assert to_fixed(-0.125, 2) == -0.13
    assert to_fixed(733.4, 0) == 733.0


def test_clamp_and_fmt():
    assert clamp(30, 6, 24) == 24
    assert clamp(2, 6, 24) == 6
    assert fmt_num(4.0) == "4"
    assert fmt_num(2.667) == "2.667"
    assert fmt_num(450) == "450"
