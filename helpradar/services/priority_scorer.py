"""
Priority Scorer - decaying numeric priority used to order the feed

score = urgency base + category bonus + recency boost + engagement boost - report penalty,
rounded and floored at zero. Pure function of its inputs, safe to recompute at any time.
"""

import math
from datetime import datetime, timezone
from typing import Optional
from helpradar.core.config import settings
from helpradar.models.post import Category, Urgency

HIGH_URGENCY_BASE = 100
MEDIUM_URGENCY_BASE = 50

CATEGORY_BONUS = {
    Category.BLOOD_NEEDED: 50,
    Category.HELP_NEEDED: 30,
    Category.ITEM_LOST: 20,
    Category.OFFER: 10,
}
DEFAULT_CATEGORY_BONUS = 20

MAX_ENGAGEMENT_BOOST = 20
ENGAGEMENT_PER_VIEW = 0.5
REPORT_PENALTY = 10

def urgency_base(urgency, low_base: Optional[int] = None) -> int:
    """Base score for an urgency tier, unknown values count as Medium"""
    parsed = Urgency.parse(urgency)
    if parsed == Urgency.HIGH:
        return HIGH_URGENCY_BASE
    if parsed == Urgency.LOW:
        return settings.low_urgency_base if low_base is None else low_base
    return MEDIUM_URGENCY_BASE

def category_bonus(category) -> int:
    """Category bonus, unknown values get the default weight"""
    parsed = Category.parse(category)
    if parsed is None:
        return DEFAULT_CATEGORY_BONUS
    return CATEGORY_BONUS[parsed]

def hours_since(created_at: datetime, now: Optional[datetime] = None) -> float:
    """Elapsed hours, never negative. Naive datetimes are treated as UTC"""
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(timezone.utc).replace(tzinfo=None)
    if now is None:
        now = datetime.utcnow()
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    return max(0.0, (now - created_at).total_seconds() / 3600)

def recency_boost(created_at: datetime, now: Optional[datetime] = None) -> float:
    """Linear decay from the window base down to zero (~48 hours with the defaults)"""
    elapsed = hours_since(created_at, now)
    return max(0.0, settings.recency_window_base - elapsed * settings.recency_decay_per_hour)

def engagement_boost(views: int) -> float:
    return min(MAX_ENGAGEMENT_BOOST, max(0, views or 0) * ENGAGEMENT_PER_VIEW)

def calculate_priority_score(
    category,
    urgency,
    created_at: datetime,
    views: int = 0,
    reported: int = 0,
    now: Optional[datetime] = None,
    low_base: Optional[int] = None
) -> int:
    """Compute the feed priority for a post. Always returns an integer >= 0"""
    score = float(urgency_base(urgency, low_base))
    score += category_bonus(category)
    score += recency_boost(created_at, now)
    score += engagement_boost(views)
    score -= max(0, reported or 0) * REPORT_PENALTY

    # Half-up rounding
    return max(0, int(math.floor(score + 0.5)))

def score_post(post, now: Optional[datetime] = None) -> int:
    """Score anything carrying the post attributes (ORM row or PostRecord)"""
    return calculate_priority_score(
        post.category,
        post.urgency,
        post.created_at,
        views=post.views,
        reported=post.reported,
        now=now
    )

def priority_color(score: int) -> str:
    """Badge color for a priority score"""
    if score >= 150:
        return "red"
    if score >= 100:
        return "orange"
    if score >= 50:
        return "yellow"
    return "green"

def format_time_ago(created_at: datetime, now: Optional[datetime] = None) -> str:
    """Short relative age label such as '5m ago'"""
    seconds = int(hours_since(created_at, now) * 3600)

    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 604800:
        return f"{seconds // 86400}d ago"
    return created_at.date().isoformat()
