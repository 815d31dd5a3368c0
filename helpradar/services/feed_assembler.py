"""
Feed Assembler - filter, order and paginate candidate posts

Works on an in-memory candidate set already loaded by the post repository.
Priority ordering uses the stored priority field; nearest ordering is computed
per request from the viewer's coordinates.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional
from helpradar.core.config import settings
from helpradar.models.post import Coordinates, PostRecord, PostStatus, RankedResult
from helpradar.services.geo_ranker import sort_by_distance

class FeedAssemblyError(Exception):
    """Raised when a feed request cannot be honoured as asked"""

class MissingViewerLocationError(FeedAssemblyError):
    def __init__(self):
        super().__init__("Sorting by nearest requires the viewer's lat and lng")

class InvalidViewerLocationError(FeedAssemblyError):
    def __init__(self, viewer: Coordinates):
        super().__init__(
            f"Invalid viewer location lat={viewer.latitude} lng={viewer.longitude}, "
            "lat must be within -90..90 and lng within -180..180"
        )

class SortMode(str, Enum):
    RECENT = "recent"
    PRIORITY = "priority"
    NEAREST = "nearest"
    OLDEST = "oldest"

    @classmethod
    def parse(cls, value) -> "SortMode":
        """Unknown or missing sort values fall back to the recent feed"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.RECENT

@dataclass
class FeedFilter:
    city: Optional[str] = None
    category: Optional[str] = None
    urgency: Optional[str] = None
    query: Optional[str] = None
    status: str = PostStatus.ACTIVE.value
    created_by: Optional[str] = None
    contact_email: Optional[str] = None

    def matches(self, post: PostRecord) -> bool:
        """All set criteria must hold"""
        if self.status and post.status != self.status:
            return False
        if self.city and self.city.lower() not in (post.city or "").lower():
            return False
        if self.category and post.category != self.category:
            return False
        if self.urgency and post.urgency != self.urgency:
            return False
        if self.created_by and post.created_by != self.created_by:
            return False
        if self.contact_email:
            email = post.contact.email if post.contact else None
            if email != self.contact_email:
                return False
        if self.query:
            needle = self.query.lower()
            if needle not in post.title.lower() and needle not in post.description.lower():
                return False
        return True

@dataclass
class FeedPage:
    results: List[RankedResult] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total

    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.page_size,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasMore": self.has_more
        }

def is_valid_location(coords: Coordinates) -> bool:
    """Finite and inside the latitude/longitude ranges"""
    lat, lng = coords.latitude, coords.longitude
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180

def clamp_page(page: Optional[int]) -> int:
    return max(1, page or 1)

def clamp_page_size(page_size: Optional[int], max_page_size: Optional[int] = None) -> int:
    """Oversized or non-positive page sizes are clamped, never rejected"""
    cap = max_page_size or settings.feed_max_page_size
    if not page_size or page_size < 1:
        page_size = settings.feed_default_page_size
    return min(page_size, cap)

class FeedAssembler:
    def __init__(self, max_page_size: Optional[int] = None):
        self.max_page_size = max_page_size or settings.feed_max_page_size

    def order(self, posts: List[PostRecord], sort_mode: SortMode, viewer: Optional[Coordinates]) -> List[RankedResult]:
        if sort_mode == SortMode.NEAREST:
            if viewer is None:
                raise MissingViewerLocationError()
            if not is_valid_location(viewer):
                raise InvalidViewerLocationError(viewer)
            return sort_by_distance(posts, viewer.latitude, viewer.longitude)

        if sort_mode == SortMode.PRIORITY:
            ordered = sorted(posts, key=lambda p: (p.priority, p.created_at), reverse=True)
        elif sort_mode == SortMode.OLDEST:
            ordered = sorted(posts, key=lambda p: p.created_at)
        else:
            ordered = sorted(posts, key=lambda p: p.created_at, reverse=True)
        return [RankedResult(post=post) for post in ordered]

    def assemble(
        self,
        candidates: Iterable[PostRecord],
        feed_filter: Optional[FeedFilter] = None,
        sort_mode=SortMode.RECENT,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
        viewer: Optional[Coordinates] = None
    ) -> FeedPage:
        """Filter, order and cut one page out of the candidate posts"""
        feed_filter = feed_filter or FeedFilter()
        sort_mode = SortMode.parse(sort_mode)
        page = clamp_page(page)
        page_size = clamp_page_size(page_size, self.max_page_size)

        matching = [post for post in candidates if feed_filter.matches(post)]
        ordered = self.order(matching, sort_mode, viewer)

        skip = (page - 1) * page_size
        return FeedPage(
            results=ordered[skip:skip + page_size],
            total=len(matching),
            page=page,
            page_size=page_size
        )

feed_assembler = FeedAssembler()
