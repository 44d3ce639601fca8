"""Read-only inspection commands.

None of these commands provision anything; they read the catalog or an
environment file.
"""

from __future__ import annotations

from pathlib import Path

from deploywire.catalog.identity import derive
from deploywire.catalog.keys import wiring_key
from deploywire.catalog.kinds import ResourceKind
from deploywire.cli.ux import console, header, print_table, warning
from deploywire.config.settings import Settings
from deploywire.environment.store import EnvironmentStore
from deploywire.lookup import Lookup


def _open_lookup(settings: Settings, environment: str | None, path: str | None) -> Lookup:
    store = EnvironmentStore(Path(path) if path else Path(settings.deployments_file), autosave=False)
    store.select(environment or settings.environment)
    return Lookup(store)


def kinds_command() -> int:
    """List the resource catalog."""
    rows = [
        [kind.key_name, kind.recipe.template, kind.recipe.version, kind.recipe.initializer or "-"]
        for kind in ResourceKind
    ]
    print_table("Resource catalog", ["Kind", "Template", "Version", "Initializer"], rows)
    return 0


def derive_command(kind: str, namespace: str | None, settings: Settings) -> int:
    """Print the derived location of a kind/namespace pair."""
    resource_kind = ResourceKind.parse(kind)
    location = derive(resource_kind, namespace, deployer=settings.deployer)
    console.print(f"{wiring_key(resource_kind, namespace)}\t{location}")
    return 0


def show_command(settings: Settings, environment: str | None = None, path: str | None = None) -> int:
    """Show every wired entry of an environment."""
    lookup = _open_lookup(settings, environment, path)
    header(f"deploywire: {lookup.environment}")

    wired = lookup.wired()
    if not wired:
        warning("No resources wired in this environment")
        return 0

    rows = []
    for kind, namespace, location in wired:
        expected = derive(kind, namespace, deployer=settings.deployer)
        status = "ok" if expected == location else "drifted"
        if lookup.setup_pending(kind, namespace):
            status += ", setup pending"
        rows.append([kind.key_name, namespace or "-", location, status])
    print_table("Wired resources", ["Kind", "Namespace", "Location", "Derivation"], rows)
    return 0


def resolve_command(
    kind: str,
    namespace: str | None,
    settings: Settings,
    environment: str | None = None,
    path: str | None = None,
) -> int:
    """Print the recorded location of one resource."""
    lookup = _open_lookup(settings, environment, path)
    console.print(lookup.resolve(ResourceKind.parse(kind), namespace))
    return 0
