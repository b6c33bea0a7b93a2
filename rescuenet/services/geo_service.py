"""Geo queries over the volunteer directory."""

from __future__ import annotations

import math
from dataclasses import dataclass

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from rescuenet.models.user import User, UserRole

EARTH_RADIUS_M = 6_371_000.0

# Half the equatorial circumference: no two points are further apart
MAX_SURFACE_DISTANCE_M = math.pi * EARTH_RADIUS_M


@dataclass(frozen=True)
class VolunteerCandidate:
    """Volunteer eligible to be notified for an SOS."""

    id: int
    name: str
    push_token: str
    latitude: float
    longitude: float
    distance_m: float


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two lat/lng points in meters."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _bounding_box_clause(latitude: float, longitude: float, radius_m: float):
    """SQL filter for a lat/lng box that contains the circle of ``radius_m``.

    Returns None when the box would cover the whole globe. The box is a
    prefilter only; callers still check the exact distance.
    """
    if radius_m >= MAX_SURFACE_DISTANCE_M:
        return None

    dlat = math.degrees(radius_m / EARTH_RADIUS_M)
    min_lat, max_lat = latitude - dlat, latitude + dlat
    lat_clause = and_(User.latitude >= min_lat, User.latitude <= max_lat)

    # Circle reaches a pole: every longitude is in range
    if min_lat <= -90 or max_lat >= 90:
        return lat_clause

    dlon = math.degrees(math.asin(min(1.0, math.sin(radius_m / EARTH_RADIUS_M) / math.cos(math.radians(latitude)))))
    if dlon >= 180:
        return lat_clause
    min_lon, max_lon = longitude - dlon, longitude + dlon

    if min_lon < -180:
        lon_clause = or_(User.longitude >= min_lon + 360, User.longitude <= max_lon)
    elif max_lon > 180:
        lon_clause = or_(User.longitude >= min_lon, User.longitude <= max_lon - 360)
    else:
        lon_clause = and_(User.longitude >= min_lon, User.longitude <= max_lon)
    return and_(lat_clause, lon_clause)


def _eligible_volunteers(db: Session, latitude: float, longitude: float, radius_m: float | None) -> list[User]:
    """Active volunteers with a push token and a location, optionally boxed around the point."""
    stmt = select(User).where(
        User.role == UserRole.VOLUNTEER,
        User.is_active.is_(True),
        User.push_token.is_not(None),
        User.push_token != "",
        User.latitude.is_not(None),
        User.longitude.is_not(None),
    )
    if radius_m is not None:
        box = _bounding_box_clause(latitude, longitude, radius_m)
        if box is not None:
            stmt = stmt.where(box)
    return list(db.execute(stmt).scalars().all())


def _rank(users: list[User], latitude: float, longitude: float, radius_m: float | None) -> list[VolunteerCandidate]:
    """Exact distances, dropped if outside ``radius_m``, nearest first (ties by id)."""
    ranked: list[VolunteerCandidate] = []
    for u in users:
        dist = haversine_m(latitude, longitude, u.latitude, u.longitude)
        if radius_m is not None and dist > radius_m:
            continue
        ranked.append(
            VolunteerCandidate(
                id=u.id,
                name=u.full_name,
                push_token=u.push_token,
                latitude=u.latitude,
                longitude=u.longitude,
                distance_m=dist,
            )
        )
    ranked.sort(key=lambda c: (c.distance_m, c.id))
    return ranked


def find_within_radius(
    db: Session,
    latitude: float,
    longitude: float,
    radius_m: float,
    limit: int,
) -> list[VolunteerCandidate]:
    """Eligible volunteers within ``radius_m`` of the point, nearest first, at most ``limit``."""
    users = _eligible_volunteers(db, latitude, longitude, radius_m)
    return _rank(users, latitude, longitude, radius_m)[:limit]


def find_nearest(
    db: Session,
    latitude: float,
    longitude: float,
    limit: int,
    start_radius_m: float = 10_000.0,
) -> list[VolunteerCandidate]:
    """The ``limit`` eligible volunteers nearest to the point, regardless of distance.

    Searches a growing box so the location index does the work when help is
    reasonably close. Once ``limit`` volunteers lie inside the current
    circle, nobody outside it can be nearer, so the answer is exact.
    """
    if limit <= 0:
        return []
    radius = max(start_radius_m, 1.0)
    while radius < MAX_SURFACE_DISTANCE_M:
        found = find_within_radius(db, latitude, longitude, radius, limit)
        if len(found) >= limit:
            return found
        radius *= 4
    return _rank(_eligible_volunteers(db, latitude, longitude, None), latitude, longitude, None)[:limit]


def select_candidates(
    db: Session,
    latitude: float,
    longitude: float,
    limit: int,
    radius_m: float,
) -> list[VolunteerCandidate]:
    """
    Pick the volunteers to notify for an SOS at the given point:
      1. up to ``limit`` volunteers within ``radius_m``, nearest first
      2. if there are none, the ``limit`` nearest volunteers anywhere

    Only active volunteers with a push token and a known location count.
    """
    nearby = find_within_radius(db, latitude, longitude, radius_m, limit)
    if nearby:
        return nearby
    return find_nearest(db, latitude, longitude, limit, start_radius_m=radius_m)
