import time

import pytest

from reactornet.logger import FatalError
from reactornet.poller import EPollPoller
from reactornet.timer_queue import TimerQueue, how_much_time_from_now
from reactornet.timestamp import Timestamp, add_time


class _Loop:
    def __init__(self, in_loop=True):
        self.poller = EPollPoller(self)
        self.in_loop = in_loop

    def update_channel(self, channel):
        self.poller.update_channel(channel)

    def remove_channel(self, channel):
        self.poller.remove_channel(channel)

    def run_in_loop(self, cb):
        cb()

    def is_in_loop_thread(self):
        return self.in_loop

    def spin(self, until=lambda: False, timeout=2.0):
        deadline = time.monotonic() + timeout
        while not until() and time.monotonic() < deadline:
            active = []
            stamp = self.poller.poll(20, active)
            for channel in active:
                channel.handle_event(stamp)


@pytest.fixture
def loop():
    lp = _Loop()
    yield lp
    lp.poller.close()


@pytest.fixture
def queue(loop):
    q = TimerQueue(loop)
    yield q
    q.close()


def _after(seconds):
    return add_time(Timestamp.now(), seconds)


def test_delay_for_past_time_is_minimum():
    assert how_much_time_from_now(Timestamp(1)) == 0.0001


def test_delay_for_future_time():
    delay = how_much_time_from_now(_after(5))
    assert 4.0 < delay <= 5.0


def test_one_shot_timer_fires_once(loop, queue):
    calls = []
    queue.add_timer(lambda: calls.append("once"), _after(0.01), 0.0)
    loop.spin(lambda: calls)
    loop.spin(timeout=0.1)
    assert calls == ["once"]


def test_timers_fire_in_expiry_order(loop, queue):
    calls = []
    queue.add_timer(lambda: calls.append("late"), _after(0.05), 0.0)
    queue.add_timer(lambda: calls.append("early"), _after(0.01), 0.0)
    loop.spin(lambda: len(calls) == 2)
    assert calls == ["early", "late"]


def test_cancel_before_expiry(loop, queue):
    calls = []
    timer_id = queue.add_timer(lambda: calls.append("cancelled"), _after(0.02), 0.0)
    queue.add_timer(lambda: calls.append("kept"), _after(0.04), 0.0)
    queue.cancel(timer_id)
    loop.spin(lambda: calls)
    loop.spin(timeout=0.05)
    assert calls == ["kept"]


def test_repeating_timer_until_cancelled(loop, queue):
    calls = []
    timer_id = queue.add_timer(lambda: calls.append("tick"), _after(0.01), 0.01)
    loop.spin(lambda: len(calls) >= 3)
    assert len(calls) >= 3
    queue.cancel(timer_id)
    fired = len(calls)
    loop.spin(timeout=0.1)
    assert len(calls) == fired


def test_cancel_from_own_callback_stops_repeating(loop, queue):
    calls = []
    holder = []

    def callback():
        calls.append("tick")
        queue.cancel(holder[0])

    timer_id = queue.add_timer(callback, _after(0.01), 0.01)
    holder.append(timer_id)
    queue.add_timer(lambda: calls.append("later"), _after(0.08), 0.0)
    loop.spin(lambda: "later" in calls)
    loop.spin(timeout=0.05)
    assert calls == ["tick", "later"]


def test_cancel_after_firing_is_harmless(loop, queue):
    calls = []
    first = queue.add_timer(lambda: calls.append("first"), _after(0.01), 0.0)
    loop.spin(lambda: calls)
    queue.cancel(first)
    queue.add_timer(lambda: calls.append("second"), _after(0.01), 0.0)
    loop.spin(lambda: len(calls) == 2)
    assert calls == ["first", "second"]


def test_close_detaches_channel(loop):
    q = TimerQueue(loop)
    assert len(loop.poller.channels) == 1
    q.close()
    assert loop.poller.channels == {}


def test_add_outside_loop_thread_is_fatal():
    lp = _Loop(in_loop=False)
    q = TimerQueue(lp)
    try:
        with pytest.raises(FatalError):
            q.add_timer(lambda: None, _after(1), 0.0)
    finally:
        q.close()
        lp.poller.close()