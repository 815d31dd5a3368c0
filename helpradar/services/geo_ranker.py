"""
Geo-Distance Ranker - haversine distances and nearest-first ordering
"""

import math
from typing import Iterable, List, Optional
from helpradar.models.post import PostRecord, RankedResult

EARTH_RADIUS_KM = 6371.0

def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance between two points in kilometers."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Float error can push a slightly past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

def format_distance(km: float) -> str:
    """Human readable distance: meters below 1 km, one decimal up to 10 km"""
    if km < 1:
        return f"{int(math.floor(km * 1000 + 0.5))}m"
    if km <= 10:
        return f"{km:.1f}km"
    return f"{int(math.floor(km + 0.5))}km"

def post_distance_km(post: PostRecord, viewer_lat: float, viewer_lon: float) -> Optional[float]:
    if post.coordinates is None:
        return None
    return distance_km(viewer_lat, viewer_lon, post.coordinates.latitude, post.coordinates.longitude)

def sort_by_distance(posts: Iterable[PostRecord], viewer_lat: float, viewer_lon: float) -> List[RankedResult]:
    """
    Order posts nearest first, annotating each with its distance.
    Posts without coordinates go last, keeping their input order.
    """
    located = []
    unlocated = []
    for post in posts:
        km = post_distance_km(post, viewer_lat, viewer_lon)
        if km is None:
            unlocated.append(RankedResult(post=post))
        else:
            located.append(RankedResult(post=post, distance_km=km, distance_label=format_distance(km)))

    # sorted() is stable, so equal distances keep their input order
    located = sorted(located, key=lambda result: result.distance_km)
    return located + unlocated
