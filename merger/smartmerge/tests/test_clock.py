import datetime

from merger.smartmerge.core import clock


def test_run_stamp_is_zero_padded():
    dt = datetime.datetime(2025, 2, 3, 4, 5, 6)
    assert clock.run_stamp(dt) == "20250203_040506"


def test_run_stamp_defaults_to_current_time():
    before = datetime.datetime.now().replace(microsecond=0)
    stamp = datetime.datetime.strptime(clock.run_stamp(), clock.STAMP_FORMAT)
    assert abs((stamp - before).total_seconds()) < 2.0


def test_frozen_blocks_nest_and_restore():
    t1 = datetime.datetime(2023, 1, 1, 12, 0, 0)
    t2 = datetime.datetime(2024, 1, 1, 12, 0, 0)

    with clock.frozen(t1):
        assert clock.now() == t1
        with clock.frozen(t2):
            assert clock.run_stamp() == "20240101_120000"
        assert clock.now() == t1

    assert clock.now() != t1
