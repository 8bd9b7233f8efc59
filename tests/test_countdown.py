"""
Test the quiz countdown
"""
import pytest

from quizplay.core.services.countdown import CountdownTimer, format_time


@pytest.fixture
def expirations():
    return []


@pytest.fixture
def countdown(scheduler, expirations):
    return CountdownTimer(scheduler, on_expired=lambda: expirations.append(True))


class TestFormatTime:
    """Test m:ss rendering"""

    @pytest.mark.parametrize(
        "remaining_ms, expected",
        [(0, "0:00"), (999, "0:00"), (59_000, "0:59"), (61_500, "1:01"), (600_000, "10:00"), (-50, "0:00")],
    )
    def test_format(self, remaining_ms, expected):
        assert format_time(remaining_ms) == expected


class TestCountdown:
    """Test ticking and expiry"""

    def test_counts_down_on_ticks(self, countdown, scheduler):
        countdown.start(60)
        scheduler.advance(10_000)

        assert countdown.remaining_ms == pytest.approx(50_000)
        assert countdown.running

    def test_expires_exactly_once(self, countdown, scheduler, expirations):
        ticks = []
        countdown.add_tick_listener(ticks.append)
        countdown.start(2)

        scheduler.advance(2_000)
        assert expirations == [True]
        assert countdown.expired
        assert not countdown.running

        tick_count = len(ticks)
        scheduler.advance(10_000)
        assert expirations == [True]
        assert len(ticks) == tick_count
        assert countdown.remaining_ms == 0

    def test_remaining_never_increases(self, countdown, scheduler):
        values = []
        countdown.add_tick_listener(values.append)
        countdown.start(5)
        scheduler.advance(6_000)

        assert values == sorted(values, reverse=True)
        assert min(values) == 0

    def test_zero_limit_expires_immediately(self, countdown, expirations):
        countdown.start(0)

        assert expirations == [True]
        assert not countdown.running

    def test_start_is_once_only(self, countdown, scheduler):
        countdown.start(60)
        scheduler.advance(5_000)
        countdown.start(60)

        assert countdown.remaining_ms == pytest.approx(55_000)

    def test_pause_and_resume(self, countdown, scheduler):
        countdown.start(60)
        scheduler.advance(1_000)
        countdown.pause()
        scheduler.advance(5_000)
        assert countdown.remaining_ms == pytest.approx(59_000)

        countdown.resume()
        scheduler.advance(1_000)
        assert countdown.remaining_ms == pytest.approx(58_000)

    def test_stop_releases_timer(self, countdown, scheduler):
        countdown.start(60)
        countdown.stop()

        assert scheduler.active_timers == []

    def test_low_time(self, countdown, scheduler):
        countdown.start(40)
        assert not countdown.is_low_time

        scheduler.advance(11_000)
        assert countdown.is_low_time
        assert countdown.fraction_remaining == pytest.approx(29 / 40)
