import asyncio
from dataclasses import dataclass
from typing import Callable

from skillsync.core.config import settings
from skillsync.services.gateway import COURSES, PATHWAYS, PROFILES, CollectionGateway, SqlCollectionGateway
from skillsync.services.preferences import PreferenceCache
from skillsync.stores.assessment import AssessmentStore
from skillsync.stores.careers import CareersStore
from skillsync.stores.courses import CoursesStore
from skillsync.stores.pathways import PathwaysStore
from skillsync.stores.profile import ProfileStore


@dataclass
class StoreContainer:
    """One instance of every store, sharing a single preference cache."""

    profile: ProfileStore
    courses: CoursesStore
    pathways: PathwaysStore
    careers: CareersStore
    assessment: AssessmentStore

    def hydrate(self) -> None:
        for store in (self.profile, self.courses, self.pathways, self.careers, self.assessment):
            store.hydrate()

    async def load(self, user_id: str) -> None:
        await asyncio.gather(
            self.profile.load(user_id),
            self.courses.load(user_id),
            self.pathways.load(user_id),
        )


def build_stores(
    *,
    cache: PreferenceCache | None = None,
    gateway_factory: Callable[[str], CollectionGateway] | None = None,
    timeout: float | None = None,
) -> StoreContainer:
    cache = cache or PreferenceCache(settings.preference_cache_path)
    factory = gateway_factory or SqlCollectionGateway
    container = StoreContainer(
        profile=ProfileStore(factory(PROFILES), cache, timeout=timeout),
        courses=CoursesStore(factory(COURSES), cache, timeout=timeout),
        pathways=PathwaysStore(factory(PATHWAYS), cache, timeout=timeout),
        careers=CareersStore(cache),
        assessment=AssessmentStore(cache),
    )
    container.hydrate()
    return container
