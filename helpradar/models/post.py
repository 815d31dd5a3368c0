from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class Category(str, Enum):
    HELP_NEEDED = "Help Needed"
    ITEM_LOST = "Item Lost"
    BLOOD_NEEDED = "Blood Needed"
    OFFER = "Offer"

    @classmethod
    def parse(cls, value) -> Optional["Category"]:
        """Return the matching category, or None for anything unrecognised"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

class Urgency(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, value) -> Optional["Urgency"]:
        """Return the matching urgency, or None for anything unrecognised"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

class PostStatus(str, Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"
    REMOVED = "removed"

class Coordinates(BaseModel):
    longitude: float
    latitude: float

class Contact(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

class PostRecord(BaseModel):
    """Plain post as seen by the ranking engine"""
    id: Optional[int] = None
    title: str
    description: str
    category: str
    urgency: str = Urgency.MEDIUM.value
    city: str = ""
    area: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    contact: Optional[Contact] = None
    images: List[dict] = []
    created_by: Optional[str] = None
    created_at: datetime
    expires_at: Optional[datetime] = None
    status: str = PostStatus.ACTIVE.value
    views: int = 0
    reported: int = 0
    priority: int = 0

class ClassificationSuggestion(BaseModel):
    suggestedCategory: Category
    suggestedUrgency: Urgency
    confidenceScore: int = Field(..., ge=0, le=100, description="Heuristic confidence (0-100)")
    detectedKeywords: List[str] = []
    reasoning: str = ""

class RankedResult(BaseModel):
    post: PostRecord
    distance_km: Optional[float] = Field(None, description="Only set for geo sorted feeds")
    distance_label: Optional[str] = None

# Request Models
class PostCreateRequest(BaseModel):
    title: str = ""
    description: str = ""
    category: str = ""
    city: str = ""
    area: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    contact: Optional[Contact] = None
    urgency: Optional[str] = None
    images: List[dict] = []
    userId: Optional[str] = None

class PostUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None
    urgency: Optional[str] = None
    status: Optional[PostStatus] = None
    contact: Optional[Contact] = None
    images: Optional[List[dict]] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

class SuggestRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None

class ReportReason(str, Enum):
    SPAM = "spam"
    INAPPROPRIATE = "inappropriate"
    FAKE = "fake"
    DUPLICATE = "duplicate"
    OTHER = "other"

class ReportRequest(BaseModel):
    reason: Optional[str] = None
    description: Optional[str] = None
    email: Optional[str] = None

# Response Models
class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    hasMore: bool

class FeedResponse(BaseModel):
    posts: List[dict]
    pagination: Pagination
