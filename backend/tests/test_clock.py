from bigbrain.services.quiz import clock


def test_remaining_counts_down_from_duration():
    assert clock.remaining(100.0, 30, 100.0) == 30
    assert clock.remaining(100.0, 30, 106.0) == 24
    assert clock.remaining(100.0, 30, 129.5) == 0.5


def test_remaining_floors_at_zero():
    assert clock.remaining(100.0, 30, 130.0) == 0
    assert clock.remaining(100.0, 30, 500.0) == 0


def test_remaining_is_non_increasing():
    values = [clock.remaining(100.0, 10, 100.0 + step * 0.7) for step in range(30)]
    assert all(later <= earlier for earlier, later in zip(values, values[1:]))
    assert min(values) == 0


def test_elapsed_is_clamped_to_window():
    assert clock.elapsed(100.0, 30, 90.0) == 0
    assert clock.elapsed(100.0, 30, 112.0) == 12
    assert clock.elapsed(100.0, 30, 200.0) == 30


def test_is_open():
    assert clock.is_open(100.0, 30, 129.9)
    assert not clock.is_open(100.0, 30, 130.0)
    assert not clock.is_open(None, 30, 100.0)
