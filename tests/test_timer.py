# tests/test_timer.py
from netquiz.timer import ManualTicker, WallClockTicker


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_manual_ticker_fires_only_while_running():
    calls = []
    ticker = ManualTicker()
    assert ticker.advance(3) == 0
    ticker.start(lambda: calls.append(1))
    assert ticker.running
    assert ticker.advance(3) == 3
    ticker.stop()
    assert ticker.advance(2) == 0
    assert len(calls) == 3


def test_ticker_stops_when_callback_stops_it():
    ticker = ManualTicker()
    calls = []

    def callback():
        calls.append(1)
        if len(calls) == 2:
            ticker.stop()

    ticker.start(callback)
    assert ticker.advance(5) == 2


def test_wall_clock_ticker_fires_per_whole_second():
    clock = FakeClock()
    calls = []
    ticker = WallClockTicker(clock=clock)
    ticker.start(lambda: calls.append(1))
    clock.now += 2.5
    assert ticker.poll() == 2
    clock.now += 0.6
    assert ticker.poll() == 1  # carried half second
    assert ticker.poll() == 0
    assert len(calls) == 3


def test_wall_clock_ticker_idle_when_stopped():
    clock = FakeClock()
    ticker = WallClockTicker(clock=clock)
    clock.now += 10
    assert ticker.poll() == 0
