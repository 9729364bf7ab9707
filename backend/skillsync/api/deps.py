from skillsync.core.database import SessionLocal
from skillsync.services.ai import OpenRouterGateway
from skillsync.services.gateway import COURSES, CollectionGateway, SqlCollectionGateway
from skillsync.services.recommendations import RecommendationGateway


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_recommendation_gateway() -> RecommendationGateway:
    return OpenRouterGateway()


def get_courses_gateway() -> CollectionGateway:
    return SqlCollectionGateway(COURSES)
