"""
Aggregate statistics over active posts for the dashboard
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from helpradar.database import Post
from helpradar.models.post import PostStatus, Urgency

TOP_LIMIT = 10

def get_post_stats(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Overview counts plus category, urgency and location breakdowns"""
    now = now or datetime.utcnow()
    active = db.query(Post).filter(Post.status == PostStatus.ACTIVE.value)

    category_rows = (
        db.query(Post.category, func.count(Post.id))
        .filter(Post.status == PostStatus.ACTIVE.value)
        .group_by(Post.category)
        .order_by(func.count(Post.id).desc())
        .all()
    )
    urgency_rows = (
        db.query(Post.urgency, func.count(Post.id))
        .filter(Post.status == PostStatus.ACTIVE.value)
        .group_by(Post.urgency)
        .all()
    )
    city_rows = (
        db.query(Post.city, func.count(Post.id))
        .filter(Post.status == PostStatus.ACTIVE.value)
        .group_by(Post.city)
        .order_by(func.count(Post.id).desc())
        .limit(TOP_LIMIT)
        .all()
    )
    hotspot_rows = (
        db.query(Post.city, Post.area, func.count(Post.id))
        .filter(Post.status == PostStatus.ACTIVE.value)
        .group_by(Post.city, Post.area)
        .order_by(func.count(Post.id).desc())
        .limit(TOP_LIMIT)
        .all()
    )

    total_views = (
        db.query(func.coalesce(func.sum(Post.views), 0))
        .filter(Post.status == PostStatus.ACTIVE.value)
        .scalar()
    )

    return {
        "overview": {
            "totalActive": active.count(),
            "totalResolved": db.query(Post).filter(Post.status == PostStatus.RESOLVED.value).count(),
            "totalViews": int(total_views or 0),
            "recentPosts": active.filter(Post.created_at >= now - timedelta(hours=24)).count(),
            "highUrgencyCount": active.filter(Post.urgency == Urgency.HIGH.value).count()
        },
        "categoryCounts": {category: count for category, count in category_rows},
        "urgencyCounts": {urgency: count for urgency, count in urgency_rows},
        "topCities": [{"city": city, "count": count} for city, count in city_rows],
        "hotspots": [
            {"city": city, "area": area or "General", "count": count}
            for city, area, count in hotspot_rows
        ]
    }
