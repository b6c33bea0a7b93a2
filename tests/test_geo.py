"""Geo index and candidate selection tests."""

import pytest

from rescuenet.models import UserRole
from rescuenet.services.geo_service import find_nearest, find_within_radius, haversine_m, select_candidates

# Bengaluru, MG Road
CITIZEN = (12.97, 77.59)


def test_haversine_known_distance():
    """Bengaluru -> Chennai is roughly 290 km."""
    d = haversine_m(12.9716, 77.5946, 13.0827, 80.2707)
    assert 285_000 < d < 295_000
    assert haversine_m(10.0, 10.0, 10.0, 10.0) == 0


def test_within_radius_sorted_and_capped(make_user, db):
    """Only volunteers inside the radius, nearest first, at most limit."""
    far = make_user(name="far", latitude=13.06, longitude=77.59, push_token="t-far")  # ~10 km
    mid = make_user(name="mid", latitude=12.99, longitude=77.59, push_token="t-mid")  # ~2.2 km
    near = make_user(name="near", latitude=12.971, longitude=77.59, push_token="t-near")  # ~110 m
    make_user(name="other city", latitude=13.0827, longitude=80.2707, push_token="t-chennai")

    found = find_within_radius(db, *CITIZEN, radius_m=10_000, limit=3)
    assert [c.id for c in found] == [near.id, mid.id]
    assert all(c.distance_m <= 10_000 for c in found)
    assert far.id not in {c.id for c in found}

    assert [c.id for c in find_within_radius(db, *CITIZEN, radius_m=10_000, limit=1)] == [near.id]


def test_ineligible_volunteers_never_selected(make_user, db):
    make_user(name="no token", latitude=12.971, longitude=77.59)
    make_user(name="blank token", latitude=12.971, longitude=77.59, push_token="")
    make_user(name="citizen", role=UserRole.CITIZEN, latitude=12.971, longitude=77.59, push_token="t-c")
    make_user(name="inactive", latitude=12.971, longitude=77.59, push_token="t-i", is_active=False)
    make_user(name="no location", push_token="t-nl")
    ok = make_user(name="ok", latitude=12.972, longitude=77.59, push_token="t-ok")

    found = select_candidates(db, *CITIZEN, limit=3, radius_m=10_000)
    assert [c.id for c in found] == [ok.id]
    assert all(c.push_token for c in found)


def test_fallback_to_nearest_anywhere(make_user, db):
    """Nobody within radius: the K nearest anywhere, in true distance order."""
    v_mysuru = make_user(name="mysuru", latitude=12.2958, longitude=76.6394, push_token="t1")  # ~130 km
    v_delhi = make_user(name="delhi", latitude=28.6139, longitude=77.2090, push_token="t2")  # ~1,740 km
    v_chennai = make_user(name="chennai", latitude=13.0827, longitude=80.2707, push_token="t3")  # ~290 km
    make_user(name="london", latitude=51.5074, longitude=-0.1278, push_token="t4")  # ~8,000 km

    assert find_within_radius(db, *CITIZEN, radius_m=10_000, limit=3) == []
    found = select_candidates(db, *CITIZEN, limit=3, radius_m=10_000)
    assert [c.id for c in found] == [v_mysuru.id, v_chennai.id, v_delhi.id]
    assert found[0].distance_m > 10_000


def test_fallback_reaches_other_side_of_world(make_user, db):
    """A single volunteer on the far side of the planet is still found."""
    v = make_user(name="antipode", latitude=-12.97, longitude=-102.41, push_token="t")
    found = find_nearest(db, *CITIZEN, limit=3)
    assert [c.id for c in found] == [v.id]


def test_no_volunteers_anywhere(db):
    assert select_candidates(db, *CITIZEN, limit=3, radius_m=10_000) == []


def test_radius_search_across_antimeridian(make_user, db):
    v = make_user(name="fiji east", latitude=-16.5, longitude=-179.99, push_token="t")
    found = find_within_radius(db, -16.5, 179.99, radius_m=10_000, limit=3)
    assert [c.id for c in found] == [v.id]
    assert found[0].distance_m < 3_000


def test_radius_search_near_pole(make_user, db):
    v = make_user(name="station", latitude=89.99, longitude=-120.0, push_token="t")
    found = find_within_radius(db, 89.99, 60.0, radius_m=10_000, limit=3)
    assert [c.id for c in found] == [v.id]


@pytest.mark.parametrize("limit", [0, -1])
def test_nearest_with_non_positive_limit(make_user, db, limit):
    make_user(latitude=12.971, longitude=77.59, push_token="t")
    assert find_nearest(db, *CITIZEN, limit=limit) == []
