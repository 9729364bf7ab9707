from uuid import uuid4
from datetime import datetime
from sqlalchemy import Column, String, Text, Boolean, Integer, DateTime, Float, JSON
from skillsync.core.database import Base


def _new_row_id() -> str:
    return uuid4().hex


class UserProfileRow(Base):
    __tablename__ = "user_profiles"

    id = Column(String(36), primary_key=True, default=_new_row_id)
    user_id = Column(String(120), nullable=False, unique=True, index=True)
    bio = Column(Text, nullable=False, default="")
    education = Column(JSON, nullable=False, default=list)
    skills = Column(JSON, nullable=False, default=list)
    experience = Column(JSON, nullable=False, default=list)
    assessment_scores = Column(JSON, nullable=True)
    dominant_type = Column(String(50), nullable=True)
    assessment_completed_at = Column(String(40), nullable=True)
    completion_percentage = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class UserCourseRow(Base):
    __tablename__ = "user_courses"

    id = Column(String(36), primary_key=True, default=_new_row_id)
    user_id = Column(String(120), nullable=False, index=True)
    course_id = Column(String(120), nullable=False)
    title = Column(String(300), nullable=False)
    platform = Column(String(1000), nullable=False, default="")
    instructor = Column(String(200), nullable=True)
    duration = Column(String(100), nullable=True)
    difficulty = Column(String(20), nullable=False, default="beginner")
    price = Column(Float, nullable=False, default=0.0)
    rating = Column(Float, nullable=False, default=0.0)
    url = Column(String(1000), nullable=False, default="")
    category = Column(String(100), nullable=False, default="")
    bookmarked = Column(Boolean, nullable=False, default=False)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class UserPathwayRow(Base):
    __tablename__ = "user_pathways"

    id = Column(String(36), primary_key=True, default=_new_row_id)
    user_id = Column(String(120), nullable=False, index=True)
    pathway_id = Column(String(120), nullable=False)
    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=False, default="")
    level = Column(String(20), nullable=False, default="beginner")
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(String(40), nullable=True)
    estimated_time = Column(String(100), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    steps_data = Column(JSON, nullable=False, default=list)
    resources_data = Column(JSON, nullable=False, default=list)
    is_custom = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


# Document key -> column attribute, per collection. "$id"/"$createdAt"/"$updatedAt"
# are added by the gateway and are never writable.
COLLECTIONS = {
    "profiles": (
        UserProfileRow,
        {
            "userId": "user_id",
            "bio": "bio",
            "education": "education",
            "skills": "skills",
            "experience": "experience",
            "assessmentScores": "assessment_scores",
            "dominantType": "dominant_type",
            "assessmentCompletedAt": "assessment_completed_at",
            "completionPercentage": "completion_percentage",
        },
    ),
    "courses": (
        UserCourseRow,
        {
            "userId": "user_id",
            "courseId": "course_id",
            "title": "title",
            "platform": "platform",
            "instructor": "instructor",
            "duration": "duration",
            "difficulty": "difficulty",
            "price": "price",
            "rating": "rating",
            "url": "url",
            "category": "category",
            "bookmarked": "bookmarked",
            "completed": "completed",
        },
    ),
    "pathways": (
        UserPathwayRow,
        {
            "userId": "user_id",
            "pathwayId": "pathway_id",
            "name": "name",
            "category": "category",
            "level": "level",
            "completed": "completed",
            "completedAt": "completed_at",
            "estimatedTime": "estimated_time",
            "description": "description",
            "stepsData": "steps_data",
            "resourcesData": "resources_data",
            "isCustom": "is_custom",
        },
    ),
}
