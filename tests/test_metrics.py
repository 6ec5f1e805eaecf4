import math

from bdindex.actions.metrics import RESPONSE_TIME_BUCKETS, ActionMetrics


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_buckets_match_the_configured_bounds():
    assert RESPONSE_TIME_BUCKETS == (0.5, 1, 2, 3, 4, 5)
    metrics = ActionMetrics()
    assert list(metrics.response_time_buckets("/x")) == [0.5, 1, 2, 3, 4, 5, math.inf]


def test_success_and_error_counts_are_per_path():
    metrics = ActionMetrics()
    metrics.record_success("/a")
    metrics.record_success("/a")
    metrics.record_error("/b")
    assert metrics.success_count("/a") == 2
    assert metrics.error_count("/a") == 0
    assert metrics.error_count("/b") == 1
    assert metrics.success_count("/b") == 0


def test_response_time_goes_into_matching_bucket():
    clock = FakeClock(100.0)
    metrics = ActionMetrics(clock=clock)
    clock.now = 101.5
    metrics.record_response_time("/a", 100.0)
    buckets = metrics.response_time_buckets("/a")
    assert buckets[1] == 0
    assert buckets[2] == 1
    assert buckets[math.inf] == 1


def test_slow_responses_only_count_in_infinity_bucket():
    clock = FakeClock(0.0)
    metrics = ActionMetrics(clock=clock)
    clock.now = 60.0
    metrics.record_response_time("/slow", 0.0)
    buckets = metrics.response_time_buckets("/slow")
    assert buckets[5] == 0
    assert buckets[math.inf] == 1


def test_cumulative_counts_never_decrease():
    clock = FakeClock(0.0)
    metrics = ActionMetrics(clock=clock)
    for elapsed in (0.1, 0.7, 2.5, 4.9, 9.0, 0.5):
        clock.now = elapsed
        metrics.record_response_time("/a", 0.0)
    counts = list(metrics.response_time_buckets("/a").values())
    assert counts == sorted(counts)
    assert counts[-1] == 6