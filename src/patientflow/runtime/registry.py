"""
Store registry - one entity store per entity type.

The dashboard builds every store once at startup from a seed dataset and
then treats each as the only source of truth for its entity type.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from patientflow.core.config import PatientFlowConfig
from patientflow.core.errors import UnknownEntityError
from patientflow.demo_data.loader import SeedDataLoader, load_default_seed
from patientflow.runtime.store import AsyncEntityStore, Clock, EntityStore

ENTITY_NAMES = (
    "Patient",
    "Document",
    "PhysicianGroup",
    "HomeHealthAgency",
    "ActionItem",
    "BillingCode",
    "CareCoordination",
    "UserActivity",
)


class StoreRegistry:
    """
    Holds the stores for a session, keyed by entity name.

    Args:
        seed: Mapping of entity name to seed records; a store is created
            for every entity in it
        config: Store settings (id counter start, page size)
        clock: Time source shared by every store
    """

    def __init__(
        self,
        seed: Mapping[str, Iterable[Mapping[str, Any]]] | None = None,
        config: PatientFlowConfig | None = None,
        clock: Clock | None = None,
    ):
        self.config = config or PatientFlowConfig()
        self._clock = clock
        self._stores: dict[str, EntityStore] = {}

        for entity_name, records in (seed or {}).items():
            self.register(entity_name, records)

    def register(
        self, entity_name: str, initial: Iterable[Mapping[str, Any]] = ()
    ) -> EntityStore:
        """
        Create a store for an entity, replacing any existing one.

        Args:
            entity_name: Entity name
            initial: Seed records

        Returns:
            The new store
        """
        store = EntityStore(
            entity_name,
            initial,
            id_counter_start=self.config.store.id_counter_start,
            default_page_size=self.config.store.default_page_size,
            clock=self._clock,
        )
        self._stores[entity_name] = store
        return store

    def get(self, entity_name: str) -> EntityStore | None:
        """Get a store by entity name."""
        return self._stores.get(entity_name)

    def __getitem__(self, entity_name: str) -> EntityStore:
        store = self._stores.get(entity_name)
        if store is None:
            raise UnknownEntityError(entity_name)
        return store

    def __contains__(self, entity_name: object) -> bool:
        return entity_name in self._stores

    def __iter__(self) -> Iterator[EntityStore]:
        return iter(self._stores.values())

    def __len__(self) -> int:
        return len(self._stores)

    def names(self) -> list[str]:
        """Entity names in registration order."""
        return list(self._stores)

    def counts(self) -> dict[str, int]:
        """Record count per entity."""
        return {name: len(store) for name, store in self._stores.items()}

    def as_async(self) -> AsyncStoreRegistry:
        """Async view over the same stores."""
        return AsyncStoreRegistry(self)


class AsyncStoreRegistry:
    """Registry view handing out ``AsyncEntityStore`` facades."""

    def __init__(self, registry: StoreRegistry):
        self.registry = registry
        self._facades: dict[str, AsyncEntityStore] = {}

    def get(self, entity_name: str) -> AsyncEntityStore | None:
        store = self.registry.get(entity_name)
        if store is None:
            return None
        facade = self._facades.get(entity_name)
        if facade is None or facade.store is not store:
            facade = AsyncEntityStore(store)
            self._facades[entity_name] = facade
        return facade

    def __getitem__(self, entity_name: str) -> AsyncEntityStore:
        facade = self.get(entity_name)
        if facade is None:
            raise UnknownEntityError(entity_name)
        return facade

    def names(self) -> list[str]:
        return self.registry.names()


def build_default_registry(
    config: PatientFlowConfig | None = None, clock: Clock | None = None
) -> StoreRegistry:
    """
    Build the registry for a dashboard session.

    Seeds from ``config.seed.path`` when set, else from the bundled dataset.
    Every entity in ``ENTITY_NAMES`` gets a store even if the seed lacks it.
    """
    config = config or PatientFlowConfig()
    if config.seed.path is not None:
        seed = SeedDataLoader().load(config.seed.path)
    else:
        seed = load_default_seed()

    registry = StoreRegistry(seed, config=config, clock=clock)
    for entity_name in ENTITY_NAMES:
        if entity_name not in registry:
            registry.register(entity_name)
    return registry
