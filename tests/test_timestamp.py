import time

from reactornet.timestamp import Timestamp, add_time


def test_default_is_invalid():
    assert Timestamp() == Timestamp.invalid()
    assert not Timestamp.invalid().valid()


def test_positive_is_valid():
    assert Timestamp(1).valid()
    assert not Timestamp(-5).valid()


def test_now_is_valid_and_monotonic_enough():
    first = Timestamp.now()
    second = Timestamp.now()
    assert first.valid()
    assert first <= second


def test_ordering():
    assert Timestamp(10) < Timestamp(20)
    assert not Timestamp(20) < Timestamp(10)
    assert sorted([Timestamp(3), Timestamp(1), Timestamp(2)]) == [
        Timestamp(1),
        Timestamp(2),
        Timestamp(3),
    ]


def test_add_time_whole_seconds():
    base = Timestamp(5)
    moved = add_time(base, 2)
    assert moved.micro_seconds_since_epoch - base.micro_seconds_since_epoch == 2 * Timestamp.MICRO_SECONDS_PER_SECOND


def test_add_time_fractional_seconds():
    assert add_time(Timestamp(0), 1.5) == Timestamp(1_500_000)


def test_add_time_zero_is_identity():
    stamp = Timestamp.now()
    assert add_time(stamp, 0) == stamp


def test_to_string_format():
    seconds = 1_600_000_000
    stamp = Timestamp(seconds * Timestamp.MICRO_SECONDS_PER_SECOND + 654_321)
    expected = time.strftime("%Y/%m/%d %H:%M:%S", time.localtime(seconds)) + ".654321"
    assert stamp.to_string() == expected


def test_to_string_microseconds_part():
    assert Timestamp(1_000_123).to_string().endswith(".000123")


def test_to_string_matches_local_time():
    seconds = 1_700_000_000
    stamp = Timestamp(seconds * Timestamp.MICRO_SECONDS_PER_SECOND)
    expected = time.strftime("%Y/%m/%d %H:%M:%S", time.localtime(seconds)) + ".000000"
    assert stamp.to_string() == expected
    assert str(stamp) == expected


def test_hashable():
    assert len({Timestamp(7), Timestamp(7), Timestamp(8)}) == 2