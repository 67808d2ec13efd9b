"""Entity type metadata: bundle settings and default sorts."""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from list_pages_shared.db.models import BundleSettings

# Entity type -> the entity type its bundles are defined by
BUNDLE_ENTITY_TYPES = {
    "node": "node_type",
    "media": "media_type",
    "taxonomy_term": "taxonomy_vocabulary",
}


@dataclass(frozen=True)
class SortSetting:
    """Default sort of a bundle."""

    name: str
    direction: str = "ASC"

    def as_query_sort(self) -> dict[str, str]:
        return {self.name: self.direction}


class EntityMetadataService:
    """Reads per-bundle settings, memoized for the lifetime of the service."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._settings: dict[tuple[str, str], BundleSettings | None] = {}

    def get_bundle_entity_type(self, entity_type: str) -> str | None:
        """Entity type whose entities define the bundles of ``entity_type``."""
        return BUNDLE_ENTITY_TYPES.get(entity_type)

    async def get_bundle_settings(self, entity_type: str, bundle: str) -> BundleSettings | None:
        key = (entity_type, bundle)
        if key not in self._settings:
            result = await self.session.execute(
                select(BundleSettings).where(
                    BundleSettings.entity_type == entity_type,
                    BundleSettings.bundle == bundle,
                )
            )
            self._settings[key] = result.scalar_one_or_none()
        return self._settings[key]

    async def get_default_sort(self, entity_type: str, bundle: str) -> SortSetting | None:
        """Default sort configured on a bundle, if any."""
        settings = await self.get_bundle_settings(entity_type, bundle)
        if settings is None or not settings.default_sort_name:
            return None
        direction = (settings.default_sort_direction or "ASC").upper()
        return SortSetting(name=settings.default_sort_name, direction=direction)
