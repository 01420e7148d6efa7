import pytest

from solarplant.ferroamp.moving_average import MovingAverage


def test_window_of_one():
    ma = MovingAverage(1)
    ma.add(1)
    assert ma.avg() == 1.0


def test_window_of_three():
    ma = MovingAverage(3)
    ma.add(1)
    ma.add(2)
    ma.add(3)
    assert ma.avg() == 2.0
    ma.add(4)
    assert ma.avg() == 3.0


def test_partial_window_uses_values_seen():
    ma = MovingAverage(3)
    ma.add(1)
    ma.add(2)
    assert ma.avg() == 1.5


def test_empty_average_is_nan():
    assert str(MovingAverage(2).avg()) == "nan"


def test_reset_starts_over():
    ma = MovingAverage(2)
    ma.add(10)
    ma.add(20)
    ma.reset()
    ma.add(4)
    assert ma.avg() == 4.0


def test_invalid_size():
    with pytest.raises(ValueError):
        MovingAverage(0)