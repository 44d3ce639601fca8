"""
Environment-scoped wiring store.

One YAML document holds the wiring state of every environment:

    debug:
      FungibleToken: '0x...'
      Proxy_FeeCollector: '0x...'
    production:
      FungibleToken: '0x...'

A store reads the document once, on the first select(), and serves every
later read from memory. Writes go to the in-memory record and re-serialize
the whole document. Before writing, the store checks that nobody else
changed the file since it was read and refuses to overwrite if they did.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
import yaml

from deploywire.core.errors import (
    ConfigurationError,
    ConfigurationNotSelected,
    CorruptEnvironmentFile,
    EnvironmentFileConflict,
)

logger = structlog.get_logger()

DEFAULT_DEPLOYMENTS_PATH = Path("deployments.yaml")

PRIMITIVE_TYPES = (str, int, float, bool)


def normalize_environment_name(tag: str) -> str:
    """Lowercase and strip an environment tag, rejecting empty ones."""
    if not isinstance(tag, str) or not tag.strip():
        raise ConfigurationError("Environment name is required", {"environment": repr(tag)})
    return tag.strip().lower()


@dataclass
class EnvironmentRecord:
    """Wiring entries of one environment."""

    tag: str
    path: Path
    entries: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> Any | None:
        return self.entries.get(key)

    def set(self, key: str, value: Any) -> None:
        if not isinstance(value, PRIMITIVE_TYPES):
            raise ConfigurationError(
                f"Environment values must be primitives, got {type(value).__name__}",
                {"key": key},
            )
        self.entries[key] = value

    def delete(self, key: str) -> bool:
        if key not in self.entries:
            return False
        del self.entries[key]
        return True

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)


class EnvironmentStore:
    """Durable key/value store scoped to an active environment."""

    def __init__(self, path: Path | str | None = None, *, autosave: bool = True) -> None:
        self.path = Path(path) if path is not None else DEFAULT_DEPLOYMENTS_PATH
        self.autosave = autosave
        self._document: Optional[Dict[str, Dict[str, Any]]] = None
        self._digest: Optional[str] = None
        self._records: Dict[str, EnvironmentRecord] = {}
        self._active: Optional[str] = None
        self._dirty = False

    # === Selection ===

    def select(self, tag: str) -> EnvironmentRecord:
        """Make an environment active, loading the backing file on first use."""
        tag = normalize_environment_name(tag)
        record = self._records.get(tag)
        if record is None:
            document = self._load_document()
            record = EnvironmentRecord(
                tag=tag,
                path=self.path,
                entries=dict(document.get(tag, {})),
            )
            self._records[tag] = record
            logger.debug("environment_loaded", environment=tag, path=str(self.path), entries=len(record))
        self._active = tag
        return record

    @property
    def environment(self) -> Optional[str]:
        """Active environment tag, or None before select()."""
        return self._active

    @property
    def active(self) -> EnvironmentRecord:
        if self._active is None:
            raise ConfigurationNotSelected()
        return self._records[self._active]

    def environments(self) -> List[str]:
        """All environment tags present in the file or loaded in memory."""
        document = self._load_document()
        return sorted(set(document) | set(self._records))

    # === Access ===

    def get(self, key: str) -> Any | None:
        if self._active is None:
            raise ConfigurationNotSelected(key)
        return self._records[self._active].get(key)

    def set(self, key: str, value: Any) -> None:
        if self._active is None:
            raise ConfigurationNotSelected(key)
        self._records[self._active].set(key, value)
        self._dirty = True
        if self.autosave:
            self.save()

    def delete(self, key: str) -> None:
        """Remove an entry from the active environment; missing keys are ignored."""
        if self._active is None:
            raise ConfigurationNotSelected(key)
        if not self._records[self._active].delete(key):
            return
        self._dirty = True
        if self.autosave:
            self.save()

    def entries(self) -> Dict[str, Any]:
        """Copy of the active environment's entries."""
        return dict(self.active.entries)

    @property
    def dirty(self) -> bool:
        """True when in-memory entries have not been written yet."""
        return self._dirty

    # === Persistence ===

    def save(self) -> None:
        """Re-serialize the whole document, failing if the file changed underneath us."""
        document = dict(self._load_document())
        on_disk = self._read_digest()
        if on_disk != self._digest:
            raise EnvironmentFileConflict(str(self.path))

        for tag, record in self._records.items():
            document[tag] = dict(record.entries)

        text = yaml.safe_dump(document, default_flow_style=False, sort_keys=True)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(text, encoding="utf-8")

        self._document = document
        self._digest = _digest(text.encode("utf-8"))
        self._dirty = False
        logger.debug("environment_saved", path=str(self.path), environments=sorted(document))

    def _load_document(self) -> Dict[str, Dict[str, Any]]:
        if self._document is not None:
            return self._document

        if not self.path.exists():
            self._document = {}
            self._digest = None
            return self._document

        raw = self.path.read_bytes()
        try:
            data = yaml.safe_load(raw.decode("utf-8"))
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise CorruptEnvironmentFile(str(self.path), str(e)) from e

        self._document = _validate_document(data, self.path)
        self._digest = _digest(raw)
        return self._document

    def _read_digest(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return _digest(self.path.read_bytes())


def _digest(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest()


def _validate_document(data: Any, path: Path) -> Dict[str, Dict[str, Any]]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise CorruptEnvironmentFile(str(path), "top level must be a mapping of environments")

    document: Dict[str, Dict[str, Any]] = {}
    for tag, section in data.items():
        if section is None:
            section = {}
        if not isinstance(section, dict):
            raise CorruptEnvironmentFile(str(path), f"section '{tag}' must be a mapping")
        for key, value in section.items():
            if not isinstance(key, str):
                raise CorruptEnvironmentFile(str(path), f"key {key!r} in '{tag}' must be a string")
            if not isinstance(value, PRIMITIVE_TYPES):
                raise CorruptEnvironmentFile(
                    str(path), f"value of '{key}' in '{tag}' must be a primitive"
                )
        if not isinstance(tag, str) or not tag.strip():
            raise CorruptEnvironmentFile(str(path), f"environment name {tag!r} must be a non-empty string")
        name = normalize_environment_name(tag)
        if name in document:
            raise CorruptEnvironmentFile(str(path), f"environment '{name}' appears more than once")
        document[name] = dict(section)
    return document
