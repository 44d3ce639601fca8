"""Wiring context shared by all routines of one run."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from deploywire.backends.base import Backend
from deploywire.backends.http import HttpBackend
from deploywire.backends.memory import InMemoryBackend
from deploywire.catalog.identity import ResourceLocation
from deploywire.catalog.kinds import ResourceKind
from deploywire.config.settings import Settings, get_settings
from deploywire.environment.store import EnvironmentStore
from deploywire.logging import bind_context
from deploywire.lookup import Lookup
from deploywire.wiring.engine import WiringEngine


def build_backend(settings: Settings) -> Backend:
    """HTTP backend when a service URL is configured, in-memory otherwise."""
    if settings.backend_url:
        return HttpBackend(
            settings.backend_url,
            deployer=settings.deployer,
            token=settings.backend_token,
            timeout=settings.http_timeout,
        )
    return InMemoryBackend(deployer=settings.deployer)


@dataclass
class WiringContext:
    """Store, backend, engine and lookup bound to one selected environment.

    Create it once at program start and pass it to every routine. Used as a
    context manager it saves unwritten entries on exit, which is how runs
    with autosave turned off get persisted.
    """

    store: EnvironmentStore
    backend: Backend
    engine: WiringEngine
    lookup: Lookup

    @classmethod
    def open(
        cls,
        environment: Optional[str] = None,
        *,
        path: Path | str | None = None,
        backend: Optional[Backend] = None,
        settings: Optional[Settings] = None,
    ) -> WiringContext:
        """Select an environment and assemble the collaborators around it."""
        settings = settings or get_settings()
        store = EnvironmentStore(path or settings.deployments_file, autosave=settings.autosave)
        store.select(environment or settings.environment)
        backend = backend if backend is not None else build_backend(settings)
        ctx = cls(
            store=store,
            backend=backend,
            engine=WiringEngine(store, backend),
            lookup=Lookup(store),
        )
        log = bind_context(environment=store.environment)
        log.debug(
            "wiring_context_opened",
            path=str(store.path),
            backend=type(backend).__name__,
        )
        return ctx

    @property
    def environment(self) -> str:
        return self.store.active.tag

    def wire(self, request: Any) -> Optional[ResourceLocation]:
        return self.engine.wire(request)

    def resolve(self, kind: ResourceKind, namespace: Optional[str] = None) -> ResourceLocation:
        return self.lookup.resolve(kind, namespace)

    def save(self) -> None:
        """Write entries the store holds only in memory."""
        if self.store.dirty:
            self.store.save()

    def __enter__(self) -> WiringContext:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        # runs on errors too
        self.save()
