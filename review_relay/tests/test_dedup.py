"""Tests for the click dedup cache."""

from review_relay.services.dedup import DedupCache


def test_make_key_defaults_subject():
    assert DedupCache.make_key("10.0.0.1", "Anna") == "10.0.0.1::Anna"
    assert DedupCache.make_key("10.0.0.1", None) == "10.0.0.1::unknown"
    assert DedupCache.make_key("10.0.0.1", "") == "10.0.0.1::unknown"


def test_second_click_within_window_is_suppressed():
    cache = DedupCache(window=30)
    assert cache.check_and_record("ip::Anna", now=100.0) is False
    assert cache.check_and_record("ip::Anna", now=120.0) is True


def test_click_after_window_is_processed_again():
    cache = DedupCache(window=30)
    cache.record("ip::Anna", now=100.0)
    assert cache.should_suppress("ip::Anna", now=130.0) is False
    assert cache.check_and_record("ip::Anna", now=131.0) is False


def test_suppressed_click_does_not_extend_window():
    cache = DedupCache(window=30)
    cache.check_and_record("ip::Anna", now=100.0)
    assert cache.check_and_record("ip::Anna", now=125.0) is True
    assert cache.check_and_record("ip::Anna", now=131.0) is False


def test_different_subjects_are_independent():
    cache = DedupCache(window=30)
    assert cache.check_and_record("ip::Anna", now=100.0) is False
    assert cache.check_and_record("ip::Oksana", now=101.0) is False
    assert cache.check_and_record("other::Anna", now=102.0) is False


def test_sweep_removes_stale_entries_once_over_threshold():
    cache = DedupCache(window=30, max_entries=3)
    for i in range(3):
        cache.record(f"old-{i}", now=0.0)
    assert len(cache) == 3

    cache.record("fresh", now=100.0)  # 4 > 3 triggers the sweep
    assert len(cache) == 1
    assert "fresh" in cache


def test_no_sweep_below_threshold():
    cache = DedupCache(window=30, max_entries=10)
    for i in range(5):
        cache.record(f"old-{i}", now=0.0)
    cache.record("fresh", now=100.0)
    assert len(cache) == 6


def test_sweep_keeps_entries_inside_window():
    cache = DedupCache(window=30, max_entries=2)
    cache.record("a", now=90.0)
    cache.record("b", now=95.0)
    cache.record("c", now=100.0)
    # Nothing is stale, so the soft bound is exceeded
    assert len(cache) == 3
