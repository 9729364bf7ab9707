import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from skillsync.data.catalog import pathway_catalog
from skillsync.schemas.api import CatalogPathway, PathwayMembership, PathwayRow, Roadmap, SkillLevel
from skillsync.services.gateway import CollectionGateway
from skillsync.services.preferences import STORAGE_KEYS, PreferenceCache
from skillsync.services.profile import calculate_progress
from skillsync.stores.base import EntityStore

logger = logging.getLogger(__name__)

AI_RECOMMENDED = "AI Recommended"
CUSTOM_SKILL = "Custom Skill"
AI_CATEGORIES = (AI_RECOMMENDED, CUSTOM_SKILL)
DEFAULT_ROADMAP_DURATION = "12 months"


class PathwaysStore(EntityStore[PathwayMembership]):
    """
    Per-user pathway state.

    Holds two kinds of membership in one collection: completion state for the
    static catalog, and AI-generated roadmaps saved by the user. Progress only
    counts catalog pathways.
    """

    model = PathwayMembership
    row_model = PathwayRow
    cache_key = STORAGE_KEYS["skill_progress"]
    load_error_message = "Failed to load your pathway progress. Please try again."
    add_error_message = "Failed to save pathway progress. Please try again."
    update_error_message = "Failed to update pathway progress. Please try again."
    delete_error_message = "Failed to remove pathway. Please try again."

    def __init__(
        self,
        gateway: CollectionGateway,
        cache: PreferenceCache,
        *,
        catalog: list[CatalogPathway] | None = None,
        timeout: float | None = None,
    ):
        super().__init__(gateway, cache, timeout=timeout)
        self.catalog = pathway_catalog() if catalog is None else list(catalog)

    def key_of(self, entity: PathwayMembership) -> str:
        return entity.pathway_id

    def from_row(self, row: PathwayRow) -> PathwayMembership:
        return PathwayMembership(
            pathway_id=row.pathway_id,
            name=row.name,
            category=row.category,
            level=row.level,
            completed=row.completed,
            completed_at=row.completed_at,
            estimated_time=row.estimated_time,
            description=row.description,
            steps=row.steps_data,
            resources=row.resources_data,
            is_custom=row.is_custom,
            db_id=row.id,
        )

    def to_row_data(self, entity: PathwayMembership) -> dict[str, Any]:
        return {
            "pathwayId": entity.pathway_id,
            "name": entity.name,
            "category": entity.category,
            "level": entity.level.value,
            "completed": entity.completed,
            "completedAt": entity.completed_at,
            "estimatedTime": entity.estimated_time,
            "description": entity.description,
            "stepsData": [step.to_wire() for step in entity.steps],
            "resourcesData": [resource.to_wire() for resource in entity.resources],
            "isCustom": entity.is_custom,
        }

    def set_catalog(self, catalog: list[CatalogPathway]) -> None:
        self.catalog = list(catalog)

    def catalog_entry(self, pathway_id: str) -> CatalogPathway | None:
        return next((entry for entry in self.catalog if entry.id == pathway_id), None)

    def is_pathway_completed(self, pathway_id: str) -> bool:
        membership = self.find(pathway_id)
        return membership is not None and membership.completed

    def get_progress(self) -> int:
        catalog_ids = {entry.id for entry in self.catalog}
        completed = sum(1 for item in self.items if item.completed and item.pathway_id in catalog_ids)
        return calculate_progress(completed, len(catalog_ids))

    async def toggle_completion(
        self,
        user_id: str,
        pathway: CatalogPathway | str,
    ) -> PathwayMembership | None:
        pathway_id = pathway if isinstance(pathway, str) else pathway.id
        now = datetime.now(timezone.utc).isoformat()

        membership = self.find(pathway_id)
        if membership is not None:
            completed = not membership.completed
            return await self.update(
                membership.pathway_id,
                {"completed": completed, "completedAt": now if completed else None},
            )

        if isinstance(pathway, str):
            entry = self.catalog_entry(pathway)
            if entry is None:
                self.error = f"Unknown pathway '{pathway}'"
                return None
            pathway = entry

        return await self.add(
            user_id,
            PathwayMembership(
                pathway_id=pathway.id,
                name=pathway.name,
                category=pathway.category,
                level=pathway.level,
                completed=True,
                completed_at=now,
                estimated_time=pathway.estimated_time,
                description=pathway.description,
            ),
        )

    # AI-generated roadmaps

    def get_ai_pathways(self) -> list[PathwayMembership]:
        return [item for item in self.items if item.category in AI_CATEGORIES]

    def roadmap_exists(self, pathway_title: str) -> bool:
        return any(item.name == pathway_title for item in self.get_ai_pathways())

    def get_roadmap(self, pathway_id: str) -> Roadmap | None:
        membership = self.find(pathway_id)
        if membership is None or membership.category not in AI_CATEGORIES:
            return None
        return Roadmap(
            pathway_title=membership.name,
            description=membership.description,
            steps=membership.steps,
            resources=membership.resources,
            estimated_duration=membership.estimated_time,
        )

    async def save_roadmap(
        self,
        user_id: str,
        roadmap: Roadmap | dict[str, Any],
        *,
        is_custom: bool = False,
    ) -> PathwayMembership | None:
        """Save a generated roadmap; a roadmap with the same title is returned instead of duplicated."""
        if not isinstance(roadmap, Roadmap):
            roadmap = Roadmap.model_validate(roadmap)

        existing = next(
            (item for item in self.get_ai_pathways() if item.name == roadmap.pathway_title),
            None,
        )
        if existing is not None:
            logger.info("Roadmap '%s' already saved for %s", roadmap.pathway_title, user_id)
            return existing

        return await self.add(
            user_id,
            PathwayMembership(
                pathway_id=f"ai-{uuid4().hex[:12]}",
                name=roadmap.pathway_title,
                category=CUSTOM_SKILL if is_custom else AI_RECOMMENDED,
                level=SkillLevel.intermediate,
                estimated_time=roadmap.estimated_duration or DEFAULT_ROADMAP_DURATION,
                description=roadmap.description,
                steps=roadmap.steps,
                resources=roadmap.resources,
                is_custom=is_custom,
            ),
        )
