from flakegen.stats import AppStats


def test_reset_records_identity_and_cap():
    stats = AppStats()
    stats.reset(3, 42, 255)
    assert stats.region_id == 3
    assert stats.worker_id == 42
    assert stats.seq_cap == 255


def test_reset_clears_counters():
    stats = AppStats()
    stats.ids = 10
    stats.waits = 4
    stats.seq_max = 7
    stats.reset(1, 2, 255)
    assert (stats.ids, stats.waits, stats.seq_max) == (0, 0, 0)


def test_reset_keeps_start_time():
    stats = AppStats(started_at=123.5)
    stats.reset(1, 2, 3)
    assert stats.started_at == 123.5


def test_as_dict_reflects_fields():
    stats = AppStats(started_at=1.0, version="1.2")
    stats.reset(5, 6, 7)
    stats.ids = 9
    assert stats.as_dict() == {
        "started_at": 1.0,
        "version": "1.2",
        "ids": 9,
        "waits": 0,
        "seq_max": 0,
        "region_id": 5,
        "worker_id": 6,
        "seq_cap": 7,
    }


def test_as_dict_is_a_copy():
    stats = AppStats()
    data = stats.as_dict()
    data["ids"] = 99
    assert stats.ids == 0