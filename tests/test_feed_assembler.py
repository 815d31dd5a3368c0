"""
Tests for the feed assembler: filtering, sort modes and pagination.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from helpradar.models.post import Contact, Coordinates
from helpradar.services.feed_assembler import (
    FeedAssembler,
    FeedFilter,
    InvalidViewerLocationError,
    MissingViewerLocationError,
    SortMode,
)

BASE = datetime(2024, 3, 1, 9, 0, 0)


@pytest.fixture
def assembler():
    return FeedAssembler(max_page_size=50)


def test_priority_sort_breaks_ties_by_newest(assembler, make_post):
    older = make_post(title="older", priority=80, created_at=BASE)
    newer = make_post(title="newer", priority=80, created_at=BASE + timedelta(hours=1))
    low = make_post(title="low", priority=40, created_at=BASE + timedelta(hours=2))

    page = assembler.assemble([older, low, newer], sort_mode=SortMode.PRIORITY)

    assert [r.post.title for r in page.results] == ["newer", "older", "low"]


def test_recent_and_oldest(assembler, make_post):
    posts = [make_post(title=str(i), created_at=BASE + timedelta(minutes=i)) for i in range(3)]

    recent = assembler.assemble(posts, sort_mode="recent")
    oldest = assembler.assemble(posts, sort_mode="oldest")

    assert [r.post.title for r in recent.results] == ["2", "1", "0"]
    assert [r.post.title for r in oldest.results] == ["0", "1", "2"]
    assert all(r.distance_km is None for r in recent.results)


def test_unknown_sort_falls_back_to_recent(assembler, make_post):
    posts = [make_post(title=str(i), created_at=BASE + timedelta(minutes=i)) for i in range(2)]
    page = assembler.assemble(posts, sort_mode="sideways")
    assert [r.post.title for r in page.results] == ["1", "0"]


def test_nearest_without_viewer_is_rejected(assembler, make_post):
    with pytest.raises(MissingViewerLocationError):
        assembler.assemble([make_post()], sort_mode=SortMode.NEAREST)


@pytest.mark.parametrize(
    "lat, lng",
    [(float("inf"), 0.0), (0.0, float("-inf")), (float("nan"), 0.0), (500.0, 0.0), (0.0, 181.0)],
)
def test_nearest_with_invalid_viewer_is_rejected(assembler, make_post, lat, lng):
    viewer = Coordinates(latitude=lat, longitude=lng)
    with pytest.raises(InvalidViewerLocationError):
        assembler.assemble([make_post(coords=(10.0, 10.0))], sort_mode=SortMode.NEAREST, viewer=viewer)


def test_nearest_accepts_boundary_viewer(assembler, make_post):
    viewer = Coordinates(latitude=-90.0, longitude=180.0)
    page = assembler.assemble([make_post(coords=(10.0, 10.0))], sort_mode=SortMode.NEAREST, viewer=viewer)
    assert page.results[0].distance_km is not None


def test_nearest_annotates_distances(assembler, make_post):
    posts = [make_post(title="paris", coords=(48.8566, 2.3522)), make_post(title="home", coords=(51.5, -0.12))]
    viewer = Coordinates(latitude=51.5074, longitude=-0.1278)

    page = assembler.assemble(posts, sort_mode="nearest", viewer=viewer)

    assert [r.post.title for r in page.results] == ["home", "paris"]
    assert page.results[0].distance_km < 2
    assert page.results[1].distance_label.endswith("km")


def test_pagination_over_75_posts(assembler, make_post):
    posts = [make_post(created_at=BASE + timedelta(minutes=i)) for i in range(75)]

    first = assembler.assemble(posts, page=1, page_size=50)
    second = assembler.assemble(posts, page=2, page_size=50)

    assert len(first.results) == 50
    assert len(second.results) == 25
    assert first.total == second.total == 75
    assert first.total_pages == second.total_pages == 2
    assert first.has_more is True
    assert second.has_more is False
    assert second.pagination() == {"page": 2, "limit": 50, "total": 75, "totalPages": 2, "hasMore": False}
    seen = {r.post.id for r in first.results} | {r.post.id for r in second.results}
    assert len(seen) == 75


def test_bounds_are_clamped(assembler, make_post):
    posts = [make_post(created_at=BASE + timedelta(minutes=i)) for i in range(60)]

    oversized = assembler.assemble(posts, page=1, page_size=500)
    negative = assembler.assemble(posts, page=-3, page_size=10)

    assert oversized.page_size == 50
    assert len(oversized.results) == 50
    assert negative.page == 1
    assert len(negative.results) == 10


def test_page_beyond_end_is_empty(assembler, make_post):
    page = assembler.assemble([make_post()], page=5, page_size=10)
    assert page.results == []
    assert page.total == 1


def test_filters_are_and_combined(assembler, make_post):
    match = make_post(title="Lost dog", city="Karachi", category="Item Lost", urgency="High")
    wrong_city = make_post(title="Lost dog", city="Lahore", category="Item Lost", urgency="High")
    wrong_urgency = make_post(title="Lost dog", city="Karachi", category="Item Lost", urgency="Low")
    resolved = make_post(title="Lost dog", city="Karachi", category="Item Lost", urgency="High", status="resolved")

    feed_filter = FeedFilter(city="kara", category="Item Lost", urgency="High", query="DOG")
    page = assembler.assemble([match, wrong_city, wrong_urgency, resolved], feed_filter)

    assert [r.post.id for r in page.results] == [match.id]
    assert page.total == 1


def test_query_matches_title_or_description(make_post):
    feed_filter = FeedFilter(query="insulin")
    assert feed_filter.matches(make_post(title="Need Insulin"))
    assert feed_filter.matches(make_post(description="running out of insulin"))
    assert not feed_filter.matches(make_post(title="Need a ride"))


def test_creator_and_contact_filters(make_post):
    mine = make_post(created_by="u1", contact=Contact(email="a@b.co"))
    theirs = make_post(created_by="u2")
    assert FeedFilter(created_by="u1").matches(mine)
    assert not FeedFilter(created_by="u1").matches(theirs)
    assert FeedFilter(contact_email="a@b.co").matches(mine)
    assert not FeedFilter(contact_email="a@b.co").matches(theirs)
