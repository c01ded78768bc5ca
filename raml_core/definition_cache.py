"""
Cache of parsed RAML definitions.

Definitions are keyed by the path of the API index file and stored together
with a fingerprint of every file in the API directory. A store drops the
entry as soon as any of those files changes or disappears.
"""
from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

import redis

from raml_core.errors import SpecDocumentNotFound
from raml_core.logging import log
from raml_core.models.definition import ApiDefinition
from raml_core.parser import RamlParser, SpecificationParser

Fingerprint = Dict[str, Optional[List[int]]]


def collect_dependency_files(directory: str | Path) -> list[str]:
    """Every file below ``directory``, recursively, sorted."""
    root = Path(directory)
    return sorted(str(path) for path in root.rglob("*") if path.is_file())


def fingerprint_files(files: Iterable[str]) -> Fingerprint:
    result: Fingerprint = {}
    for name in files:
        try:
            stat = Path(name).stat()
        except OSError:
            result[name] = None
            continue
        result[name] = [stat.st_mtime_ns, stat.st_size]
    return result


class BaseDefinitionStore:
    def load(self, key: str) -> Optional[ApiDefinition]:
        raise NotImplementedError()

    def save(self, key: str, definition: ApiDefinition, dependency_files: Iterable[str]) -> None:
        raise NotImplementedError()

    def delete(self, key: str) -> None:
        raise NotImplementedError()


class MemoryDefinitionStore(BaseDefinitionStore):
    def __init__(self):
        self._entries: Dict[str, tuple[ApiDefinition, Fingerprint]] = {}

    def load(self, key: str) -> Optional[ApiDefinition]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        definition, dependencies = entry
        if fingerprint_files(dependencies) != dependencies:
            log.debug("Definition cache entry {} invalidated by file change", key)
            self.delete(key)
            return None
        return definition

    def save(self, key: str, definition: ApiDefinition, dependency_files: Iterable[str]) -> None:
        self._entries[key] = (definition, fingerprint_files(dependency_files))

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)


class RedisDefinitionStore(BaseDefinitionStore):
    """Definitions serialized as JSON in Redis, shared between workers."""

    def __init__(
        self,
        client: Any = None,
        url: Optional[str] = None,
        prefix: str = "raml:definition:",
        ttl_seconds: Optional[int] = None,
    ):
        if client is None:
            if not url:
                raise ValueError("RedisDefinitionStore needs a client or a url")
            client = redis.from_url(url, decode_responses=True)
        self.client = client
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def load(self, key: str) -> Optional[ApiDefinition]:
        try:
            raw = self.client.get(self._key(key))
        except redis.RedisError as exc:
            log.warning("Definition cache read failed for {}: {}", key, exc)
            return None
        if not raw:
            return None
        try:
            payload = json.loads(raw)
            dependencies = payload["dependencies"]
            definition = ApiDefinition.model_validate(payload["definition"])
        except (ValueError, KeyError, TypeError) as exc:
            log.warning("Discarding unreadable definition cache entry {}: {}", key, exc)
            self.delete(key)
            return None
        if fingerprint_files(dependencies) != dependencies:
            log.debug("Definition cache entry {} invalidated by file change", key)
            self.delete(key)
            return None
        return definition

    def save(self, key: str, definition: ApiDefinition, dependency_files: Iterable[str]) -> None:
        payload = json.dumps(
            {
                "definition": definition.model_dump(mode="json"),
                "dependencies": fingerprint_files(dependency_files),
            }
        )
        try:
            self.client.set(self._key(key), payload, ex=self.ttl_seconds)
        except redis.RedisError as exc:
            log.warning("Definition cache write failed for {}: {}", key, exc)

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except redis.RedisError as exc:
            log.warning("Definition cache delete failed for {}: {}", key, exc)


class DefinitionCache:
    """Load-or-populate access to parsed definitions.

    Without a store every call parses the RAML tree again. With a store,
    concurrent misses on the same index file are coalesced into one parse.
    """

    def __init__(
        self,
        parser: Optional[SpecificationParser] = None,
        store: Optional[BaseDefinitionStore] = None,
        index_file: str = "index.raml",
    ):
        self.parser = parser or RamlParser()
        self.store = store
        self.index_file = index_file
        # key -> [lock, number of threads holding or waiting for it]
        self._locks: Dict[str, list] = {}
        self._locks_guard = threading.Lock()

    def index_path(self, api_directory: str | Path) -> str:
        return str(Path(api_directory) / self.index_file)

    def get_definition(self, api_directory: str | Path) -> ApiDefinition:
        index_path = self.index_path(api_directory)
        if self.store is None:
            return self._create_definition(index_path, api_directory)

        definition = self.store.load(index_path)
        if definition is not None:
            return definition

        with self._lock_for(index_path):
            definition = self.store.load(index_path)
            if definition is None:
                dependency_files = collect_dependency_files(api_directory)
                definition = self._create_definition(index_path, api_directory)
                self.store.save(index_path, definition, dependency_files)
                log.info(
                    "Cached definition {} ({} dependency files)",
                    index_path,
                    len(dependency_files),
                )
        return definition

    @contextmanager
    def _lock_for(self, key: str) -> Iterator[None]:
        """Hold the build lock for ``key``; the entry is dropped once nobody waits on it."""
        with self._locks_guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def _create_definition(self, index_path: str, api_directory: str | Path) -> ApiDefinition:
        try:
            source = Path(index_path).read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise SpecDocumentNotFound(index_path) from exc
        log.debug("Parsing RAML definition {}", index_path)
        return self.parser.parse(source, api_directory)
