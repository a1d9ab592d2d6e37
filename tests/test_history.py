from recommender.history import candidate_key, group_history, latest_shown_at


def test_candidate_key_requires_both_parts():
    assert candidate_key("rawg", "12") == "rawg:12"
    assert candidate_key("rawg", 12) == "rawg:12"
    assert candidate_key(None, "12") is None
    assert candidate_key("rawg", "  ") is None


def test_group_history_keeps_input_order_and_skips_legacy_rows(make_event, make_state):
    first = make_event("g1", "shown")
    second = make_event("g2", "like")
    third = make_event("g1", "like")
    legacy = make_event(None, "played")

    history, states = group_history([first, second, legacy, third], [make_state("g2", liked=True)])

    assert list(history.keys()) == ["rawg:g1", "rawg:g2"]
    assert history["rawg:g1"] == [first, third]
    assert history["rawg:g2"] == [second]
    assert states["rawg:g2"]["liked"] is True
    assert "rawg:g1" not in states


def test_group_history_handles_empty_inputs():
    assert group_history(None, None) == ({}, {})


def test_latest_shown_at_picks_most_recent_shown(make_event):
    events = [
        make_event("g1", "shown", created_at="2026-02-10T00:00:00Z"),
        make_event("g1", "like", created_at="2026-02-20T00:00:00Z"),
        make_event("g1", "shown", created_at="2026-02-14T12:00:00Z"),
        make_event("g1", "shown", created_at="not-a-date"),
    ]
    latest = latest_shown_at(events)
    assert latest.isoformat() == "2026-02-14T12:00:00+00:00"


def test_latest_shown_at_without_shown_events(make_event):
    assert latest_shown_at([make_event("g1", "like")]) is None
    assert latest_shown_at([]) is None
