"""Model registry: the authoritative in-memory collection of models."""

from typing import Optional

import structlog

from benchforge.models.registry import (
    BenchmarkResults,
    Model,
    ModelDraft,
    RegistryState,
    User,
)
from benchforge.storage.codec import RegistryCodec
from benchforge.storage.manager import KeyValueStore
from benchforge.storage.memory import InMemoryKeyValueStore

logger = structlog.get_logger(__name__)


class ModelRegistry:
    """Owns the registry snapshot and persists every mutation.

    Snapshots are frozen; each mutation builds a new one and swaps it in, so
    a reader holding ``registry.state`` never observes a partial update.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        codec: Optional[RegistryCodec] = None,
        state: Optional[RegistryState] = None,
    ) -> None:
        self._store = store if store is not None else InMemoryKeyValueStore()
        self._codec = codec or RegistryCodec()
        self._state = state or RegistryState()

    @classmethod
    def load(
        cls,
        store: KeyValueStore,
        codec: Optional[RegistryCodec] = None,
    ) -> "ModelRegistry":
        """Create a registry from the persisted snapshot in ``store``."""
        codec = codec or RegistryCodec()
        return cls(store=store, codec=codec, state=codec.load(store))

    @property
    def state(self) -> RegistryState:
        return self._state

    @property
    def models(self) -> tuple[Model, ...]:
        return self._state.models

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    def get_model(self, model_id: str) -> Optional[Model]:
        """Get a model by ID."""
        for model in self._state.models:
            if model.id == model_id:
                return model
        return None

    @staticmethod
    def is_available_for_benchmark(model: Model) -> bool:
        """A model can be benchmarked only while its attachment is held."""
        return model.has_attachment

    def add_model(self, draft: ModelDraft) -> Model:
        """Register a new model. Format and size checks are the caller's job."""
        model = Model(
            name=draft.name,
            format=draft.format,
            size=draft.size,
            attachment=draft.attachment,
        )
        self._commit(self._state.model_copy(update={"models": self._state.models + (model,)}))
        logger.info("Model added", model_id=model.id, name=model.name, format=model.format)
        return model

    def update_benchmark_results(self, model_id: str, results: BenchmarkResults) -> bool:
        """Replace a model's benchmark results. Returns False if not found."""
        if self.get_model(model_id) is None:
            logger.warning("Cannot record results for unknown model", model_id=model_id)
            return False

        models = tuple(
            m.model_copy(update={"benchmark_results": results}) if m.id == model_id else m
            for m in self._state.models
        )
        self._commit(self._state.model_copy(update={"models": models}))
        logger.info("Benchmark results recorded", model_id=model_id)
        return True

    def delete_model(self, model_id: str) -> bool:
        """Remove a model. Returns False if it was not registered."""
        models = tuple(m for m in self._state.models if m.id != model_id)
        if len(models) == len(self._state.models):
            return False

        self._commit(self._state.model_copy(update={"models": models}))
        logger.info("Model deleted", model_id=model_id)
        return True

    def login(self, user: User) -> None:
        """Mark the session as authenticated for ``user``."""
        self._commit(self._state.model_copy(update={"is_authenticated": True, "user": user}))
        logger.info("User logged in", user_id=user.id)

    def logout(self) -> None:
        """Reset the session. Models are left untouched."""
        self._commit(self._state.model_copy(update={"is_authenticated": False, "user": None}))
        logger.info("User logged out")

    def _commit(self, state: RegistryState) -> None:
        self._state = state
        self._codec.save(self._store, state)
