from fastapi import APIRouter, HTTPException, Depends, Request
from typing import Optional
import logging
from sqlalchemy.orm import Session
from helpradar.core.config import settings
from helpradar.database import get_db
from helpradar.models.post import (
    Coordinates, PostCreateRequest, PostRecord, PostStatus, PostUpdateRequest,
    ReportReason, ReportRequest, Urgency
)
from helpradar.services import post_repository
from helpradar.services.feed_assembler import FeedFilter, FeedAssemblyError, SortMode, feed_assembler
from helpradar.services.keyword_classifier import classify
from helpradar.services.priority_scorer import format_time_ago, priority_color
from helpradar.services.rate_limiter import rate_limiter
from helpradar.utils.validators import sanitize_text, validate_post_input, validate_post_update

logger = logging.getLogger(__name__)
router = APIRouter()

def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"

def parse_int(value: Optional[str], default: int) -> int:
    """Lenient int parsing for query params, malformed input means default"""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default

def parse_float(value: Optional[str]) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if number != number else number  # NaN

def serialize_post(post: PostRecord, distance_km: Optional[float] = None,
                   distance_label: Optional[str] = None) -> dict:
    """JSON shape of a post as returned to clients"""
    data = {
        "id": post.id,
        "title": post.title,
        "description": post.description,
        "category": post.category,
        "urgency": post.urgency,
        "city": post.city,
        "area": post.area,
        "location": None,
        "contact": post.contact.model_dump() if post.contact else None,
        "images": post.images,
        "createdBy": post.created_by,
        "createdAt": post.created_at.isoformat() if post.created_at else None,
        "expiresAt": post.expires_at.isoformat() if post.expires_at else None,
        "status": post.status,
        "views": post.views,
        "reported": post.reported,
        "priority": post.priority,
        "priorityColor": priority_color(post.priority),
        "timeAgo": format_time_ago(post.created_at) if post.created_at else None
    }
    if post.coordinates:
        data["location"] = {
            "type": "Point",
            "coordinates": [post.coordinates.longitude, post.coordinates.latitude]
        }
    if distance_km is not None:
        data["distanceKm"] = round(distance_km, 3)
        data["distance"] = distance_label
    return data

def keep_remote_images(images: list) -> list:
    """Only already-hosted image URLs are stored, inline uploads are dropped"""
    kept = []
    for image in images or []:
        url = image.get("url") if isinstance(image, dict) else None
        if url and url.startswith("http"):
            kept.append({"url": url, "public_id": image.get("public_id") or ""})
        elif url:
            logger.warning("Skipping inline image upload, no blob store configured")
    return kept

@router.get("")
async def list_posts(
    city: Optional[str] = None,
    category: Optional[str] = None,
    urgency: Optional[str] = None,
    q: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort: Optional[str] = None,
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    status: Optional[str] = None,
    userId: Optional[str] = None,
    userEmail: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Feed of posts with filters, sorting and pagination"""
    feed_filter = FeedFilter(
        city=city or None,
        category=category or None,
        urgency=urgency or None,
        query=q or None,
        status=status or PostStatus.ACTIVE.value,
        created_by=userId or None,
        contact_email=userEmail or None
    )

    viewer_lat, viewer_lng = parse_float(lat), parse_float(lng)
    viewer = None
    if viewer_lat is not None and viewer_lng is not None:
        viewer = Coordinates(latitude=viewer_lat, longitude=viewer_lng)

    try:
        candidates = post_repository.load_candidates(db, status=feed_filter.status)
        feed_page = feed_assembler.assemble(
            candidates,
            feed_filter,
            sort_mode=SortMode.parse(sort),
            page=parse_int(page, 1),
            page_size=parse_int(limit, settings.feed_default_page_size),
            viewer=viewer
        )
    except FeedAssemblyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error assembling feed: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch posts")

    return {
        "posts": [
            serialize_post(result.post, result.distance_km, result.distance_label)
            for result in feed_page.results
        ],
        "pagination": feed_page.pagination()
    }

@router.post("", status_code=201)
async def create_post(body: PostCreateRequest, request: Request, db: Session = Depends(get_db)):
    """Create a new post, pre-filling urgency from its text when left at the default"""
    ip = client_address(request)
    if not rate_limiter.check_rate_limit(ip, settings.create_rate_limit, settings.rate_limit_window_ms):
        raise HTTPException(status_code=429, detail="Too many requests. Please try again later.")

    data = body.model_copy(update={
        "title": sanitize_text(body.title),
        "description": sanitize_text(body.description),
        "city": sanitize_text(body.city),
        "area": sanitize_text(body.area) if body.area else None
    })
    if data.contact and data.contact.name:
        data.contact = data.contact.model_copy(update={"name": sanitize_text(data.contact.name)})

    errors = validate_post_input(data)
    if errors:
        raise HTTPException(status_code=400, detail={"error": "Validation failed", "details": errors})

    # Only urgency is taken from the suggestion; the author's category always stands
    urgency = data.urgency
    suggestion = None
    if not urgency or urgency == Urgency.MEDIUM.value:
        suggestion = classify(data.title, data.description)
        if suggestion.confidenceScore > settings.suggestion_apply_threshold:
            urgency = suggestion.suggestedUrgency.value

    try:
        post = post_repository.create_post(
            db,
            title=data.title,
            description=data.description,
            category=data.category,
            urgency=urgency or Urgency.MEDIUM.value,
            city=data.city,
            area=data.area,
            latitude=data.lat if data.lat is not None and data.lng is not None else None,
            longitude=data.lng if data.lat is not None and data.lng is not None else None,
            contact_name=data.contact.name if data.contact else None,
            contact_phone=data.contact.phone if data.contact else None,
            contact_email=data.contact.email if data.contact else None,
            images=keep_remote_images(data.images),
            created_by=data.userId,
            status=PostStatus.ACTIVE.value,
            views=0,
            reported=0
        )
    except Exception as e:
        logger.error(f"Error creating post: {e}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create post")

    return {
        "post": serialize_post(post.to_record()),
        "message": "Post created successfully",
        "suggestion": suggestion.model_dump() if suggestion else None
    }

@router.post("/priority/refresh")
async def refresh_priorities(db: Session = Depends(get_db)):
    """Re-evaluate the stored priority of active posts as they age"""
    try:
        updated = post_repository.refresh_priorities(db)
    except Exception as e:
        logger.error(f"Error refreshing priorities: {e}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to refresh priorities")
    return {"updated": updated}

@router.get("/{post_id}")
async def get_post(post_id: int, db: Session = Depends(get_db)):
    """Post detail, counts a view"""
    try:
        post = post_repository.get_post(db, post_id)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")

        post = post_repository.increment_views(db, post)
        return {"post": serialize_post(post.to_record())}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching post {post_id}: {e}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to fetch post")

@router.patch("/{post_id}")
async def update_post(post_id: int, body: PostUpdateRequest, db: Session = Depends(get_db)):
    """Partial update; changed fields go through the same rules as a new post"""
    try:
        post = post_repository.get_post(db, post_id)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")

        errors = validate_post_update(body)
        if errors:
            raise HTTPException(status_code=400, detail={"error": "Validation failed", "details": errors})

        changes = body.model_dump(exclude_unset=True, exclude={"contact", "images", "lat", "lng"})
        for field in ("title", "description", "city", "area"):
            if changes.get(field) is not None:
                changes[field] = sanitize_text(changes[field])
        if changes.get("status") is not None:
            changes["status"] = PostStatus(changes["status"]).value
        changes = {field: value for field, value in changes.items() if value is not None}

        if body.contact is not None:
            changes["contact_name"] = sanitize_text(body.contact.name) if body.contact.name else None
            changes["contact_phone"] = body.contact.phone
            changes["contact_email"] = body.contact.email

        if body.images is not None:
            changes["images"] = keep_remote_images(body.images)

        if body.lat is not None and body.lng is not None:
            changes["latitude"] = body.lat
            changes["longitude"] = body.lng

        post = post_repository.update_post(db, post, changes)
        return {"post": serialize_post(post.to_record()), "message": "Post updated successfully"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating post {post_id}: {e}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update post")

@router.delete("/{post_id}")
async def delete_post(post_id: int, db: Session = Depends(get_db)):
    try:
        post = post_repository.get_post(db, post_id)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")

        post_repository.delete_post(db, post)
        return {"message": "Post deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting post {post_id}: {e}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to delete post")

@router.post("/{post_id}/report", status_code=201)
async def report_post(post_id: int, body: ReportRequest, request: Request, db: Session = Depends(get_db)):
    """Report a post; heavily reported posts are hidden from the feed"""
    ip = client_address(request)
    if not rate_limiter.check_rate_limit(ip, settings.report_rate_limit, settings.rate_limit_window_ms):
        raise HTTPException(status_code=429, detail="Too many report requests. Please try again later.")

    valid_reasons = [reason.value for reason in ReportReason]
    if body.reason not in valid_reasons:
        raise HTTPException(
            status_code=400,
            detail=f"Valid reason is required ({', '.join(valid_reasons)})"
        )

    try:
        post = post_repository.get_post(db, post_id)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")

        report = post_repository.add_report(
            db,
            post,
            reason=body.reason,
            description=sanitize_text(body.description) if body.description else None,
            reporter_email=body.email
        )
        return {"message": "Report submitted successfully", "reportId": report.id}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error reporting post {post_id}: {e}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to submit report")
