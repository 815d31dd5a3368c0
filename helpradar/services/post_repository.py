"""
Post persistence on top of SQLAlchemy sessions.
Loads feed candidates for the feed assembler and performs the post writes.
"""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from helpradar.core.config import settings
from helpradar.database import Post, Report
from helpradar.models.post import PostRecord, PostStatus
from helpradar.services.priority_scorer import score_post

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ["title", "description", "category", "city", "area", "urgency", "status"]

def load_candidates(db: Session, status: str = PostStatus.ACTIVE.value, now: Optional[datetime] = None) -> List[PostRecord]:
    """Materialize every unexpired post with the given status"""
    now = now or datetime.utcnow()
    query = db.query(Post).filter(Post.status == status)
    query = query.filter(or_(Post.expires_at.is_(None), Post.expires_at > now))
    return [post.to_record() for post in query.all()]

def get_post(db: Session, post_id: int) -> Optional[Post]:
    return db.query(Post).filter(Post.id == post_id).first()

def create_post(db: Session, **fields) -> Post:
    post = Post(**fields)
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info(f"Created post {post.id} ({post.category}/{post.urgency}) with priority {post.priority}")
    return post

def update_post(db: Session, post: Post, changes: dict) -> Post:
    for field, value in changes.items():
        setattr(post, field, value)
    db.commit()
    db.refresh(post)
    return post

def delete_post(db: Session, post: Post):
    db.delete(post)
    db.commit()
    logger.info(f"Deleted post {post.id}")

def increment_views(db: Session, post: Post) -> Post:
    post.views = (post.views or 0) + 1
    db.commit()
    db.refresh(post)
    return post

def add_report(db: Session, post: Post, reason: str, description: Optional[str] = None,
               reporter_email: Optional[str] = None) -> Report:
    """Record a report, bump the post's report counter and auto-hide heavily reported posts"""
    report = Report(
        post_id=post.id,
        reason=reason,
        description=description,
        reporter_email=reporter_email,
        status="pending"
    )
    db.add(report)
    post.reported = (post.reported or 0) + 1
    db.flush()

    open_reports = db.query(Report).filter(
        Report.post_id == post.id,
        Report.status != "dismissed"
    ).count()
    if open_reports >= settings.report_auto_hide_threshold:
        post.status = PostStatus.REMOVED.value
        logger.warning(f"Post {post.id} hidden after {open_reports} reports")

    db.commit()
    db.refresh(report)
    return report

def refresh_priorities(db: Session) -> int:
    """Re-evaluate the decaying priority of every active post, returns how many changed"""
    changed = 0
    for post in db.query(Post).filter(Post.status == PostStatus.ACTIVE.value).all():
        priority = score_post(post)
        if priority != post.priority:
            post.priority = priority
            changed += 1
    db.commit()
    logger.info(f"Refreshed priority of {changed} active posts")
    return changed
