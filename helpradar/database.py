from sqlalchemy import create_engine, event, Column, Integer, String, DateTime, ForeignKey, Text, Float, JSON
from sqlalchemy.orm import declarative_base, sessionmaker, relationship
from datetime import datetime, timedelta
import logging

from helpradar.core.config import settings
from helpradar.models.post import Contact, Coordinates, PostRecord, PostStatus, Urgency
from helpradar.services.priority_scorer import score_post

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Database Models
class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(150), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False)
    urgency = Column(String, nullable=False, default=Urgency.MEDIUM.value)
    city = Column(String, nullable=False, index=True)
    area = Column(String, nullable=True, index=True)
    longitude = Column(Float, nullable=True)
    latitude = Column(Float, nullable=True)
    contact_name = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    contact_email = Column(String, nullable=True, index=True)
    images = Column(JSON, default=list)
    created_by = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    expires_at = Column(DateTime, nullable=True, index=True)
    status = Column(String, default=PostStatus.ACTIVE.value, index=True)
    views = Column(Integer, default=0)
    reported = Column(Integer, default=0)
    priority = Column(Integer, default=0, index=True)  # owned by the priority scorer

    reports = relationship("Report", back_populates="post", cascade="all, delete-orphan")

    @property
    def coordinates(self):
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(longitude=self.longitude, latitude=self.latitude)

    def to_record(self) -> PostRecord:
        contact = None
        if self.contact_name or self.contact_phone or self.contact_email:
            contact = Contact(name=self.contact_name, phone=self.contact_phone, email=self.contact_email)
        return PostRecord(
            id=self.id,
            title=self.title,
            description=self.description,
            category=self.category,
            urgency=self.urgency,
            city=self.city,
            area=self.area,
            coordinates=self.coordinates,
            contact=contact,
            images=self.images or [],
            created_by=self.created_by,
            created_at=self.created_at,
            expires_at=self.expires_at,
            status=self.status,
            views=self.views or 0,
            reported=self.reported or 0,
            priority=self.priority or 0
        )

class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    reason = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    reporter_email = Column(String, nullable=True)
    status = Column(String, default="pending")  # pending, reviewed, dismissed
    created_at = Column(DateTime, default=datetime.utcnow)

    post = relationship("Post", back_populates="reports")

# Keep the stored priority in step with the post on every write
@event.listens_for(Post, "before_insert")
def _prepare_new_post(mapper, connection, post):
    if post.created_at is None:
        post.created_at = datetime.utcnow()
    if post.expires_at is None:
        post.expires_at = post.created_at + timedelta(days=settings.post_expiry_days)
    if post.views is None:
        post.views = 0
    if post.reported is None:
        post.reported = 0
    post.priority = score_post(post)

@event.listens_for(Post, "before_update")
def _rescore_post(mapper, connection, post):
    post.priority = score_post(post)

# Create tables
def create_tables(bind=None):
    Base.metadata.create_all(bind=bind or engine)

# Dependency to get database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_database():
    create_tables()
    db = SessionLocal()
    try:
        active = db.query(Post).filter(Post.status == PostStatus.ACTIVE.value).count()
        logger.info(f"{active} active posts currently stored")
    finally:
        db.close()
