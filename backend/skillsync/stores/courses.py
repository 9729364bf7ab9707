from typing import Any

from skillsync.schemas.api import Course, CourseRow
from skillsync.services.course_generation import course_row_data
from skillsync.services.preferences import STORAGE_KEYS
from skillsync.stores.base import EntityStore


class CoursesStore(EntityStore[Course]):
    """The user's saved courses: bookmarks plus AI-generated suggestions that start unbookmarked."""

    model = Course
    row_model = CourseRow
    cache_key = STORAGE_KEYS["bookmarked_courses"]
    load_error_message = "Failed to load your courses. Please try again."
    add_error_message = "Failed to bookmark course. Please try again."
    update_error_message = "Failed to update course. Please try again."
    delete_error_message = "Failed to remove bookmark. Please try again."

    def key_of(self, entity: Course) -> str:
        return entity.id

    def from_row(self, row: CourseRow) -> Course:
        return Course(
            id=row.course_id,
            title=row.title,
            platform=row.platform,
            instructor=row.instructor,
            duration=row.duration,
            difficulty=row.difficulty,
            price=row.price,
            rating=row.rating,
            url=row.url,
            category=row.category,
            bookmarked=row.bookmarked,
            completed=row.completed,
            db_id=row.id,
            created_at=row.created_at,
        )

    def to_row_data(self, entity: Course) -> dict[str, Any]:
        return course_row_data(entity)

    def is_bookmarked(self, course_id: str) -> bool:
        course = self.find(course_id)
        return course is not None and course.bookmarked

    def get_bookmarked_courses(self, all_courses: list[Course]) -> list[Course]:
        return [course for course in all_courses if self.is_bookmarked(course.id)]

    async def toggle_bookmark(self, user_id: str, course: Course) -> bool:
        """Bookmark or un-bookmark ``course``; returns the resulting bookmarked state."""
        current = self.find(course.id)
        if current is not None and not current.bookmarked:
            updated = await self.update(course.id, {"bookmarked": True})
            return updated is not None and updated.bookmarked
        if current is not None:
            await self.remove(course.id)
            return False
        created = await self.add(user_id, course.model_copy(update={"bookmarked": True}))
        return created is not None

    async def toggle_completed(self, course_id: str) -> Course | None:
        course = self.find(course_id)
        if course is None:
            return None
        return await self.update(course_id, {"completed": not course.completed})
