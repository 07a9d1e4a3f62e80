from tapreel.core.debounce import DebounceFilter


def test_first_read_is_accepted():
    f = DebounceFilter()
    event = f.accept("A", 10.0)
    assert event is not None
    assert event.tag_id == "A"
    assert event.observed_at == 10.0


def test_same_tag_within_window_is_dropped():
    f = DebounceFilter()
    assert f.accept("A", 10.0) is not None
    assert f.accept("A", 11.9) is None
    # rejected reads do not extend the window
    assert f.last_seen_at == 10.0


def test_same_tag_after_window_is_accepted():
    f = DebounceFilter()
    f.accept("A", 10.0)
    assert f.accept("A", 12.5) is not None


def test_exactly_at_window_is_still_dropped():
    f = DebounceFilter(window_sec=2.0)
    f.accept("A", 10.0)
    assert f.accept("A", 12.0) is None


def test_different_tag_is_accepted_immediately():
    f = DebounceFilter()
    f.accept("A", 10.0)
    assert f.accept("B", 10.1) is not None
    # and A again right after B is a new tap
    assert f.accept("A", 10.2) is not None


def test_reset_forgets_last_tag():
    f = DebounceFilter()
    f.accept("A", 10.0)
    f.reset()
    assert f.accept("A", 10.5) is not None
