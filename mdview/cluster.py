"""An in-memory object store with the interface of a cluster client."""

from __future__ import annotations

import copy
import itertools
import threading
import uuid
from typing import Any, Union

from mdview.api import KIND as MARKDOWN_VIEW
from mdview.api import MarkdownView

CONFIG_MAP = "ConfigMap"
DEPLOYMENT = "Deployment"
SERVICE = "Service"

StoredObject = Union[MarkdownView, dict]


class NotFoundError(LookupError):
    """Raised when a requested object does not exist."""

    def __init__(self, kind: str, namespace: str, name: str):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        super().__init__(f'{kind} "{name}" not found in namespace "{namespace}"')


def _object_key(obj: StoredObject) -> tuple[str, str]:
    if isinstance(obj, MarkdownView):
        return obj.metadata.namespace, obj.metadata.name
    meta = obj.get("metadata", {})
    return meta.get("namespace", ""), meta.get("name", "")


def _uid_of(obj: StoredObject) -> str:
    if isinstance(obj, MarkdownView):
        return obj.metadata.uid
    return obj.get("metadata", {}).get("uid", "")


def _merge(target: dict, patch: dict) -> None:
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


class InMemoryClient:
    """Stores MarkdownView objects and plain-dict resources by kind and key.

    Every read returns an independent copy, so callers never alias stored state.
    """

    def __init__(self) -> None:
        self._objects: dict[tuple[str, str, str], StoredObject] = {}
        self._lock = threading.RLock()
        self._versions = itertools.count(1)

    def _stamp(self, obj: StoredObject, uid: str = "") -> None:
        version = str(next(self._versions))
        new_uid = uid or _uid_of(obj) or str(uuid.uuid4())
        if isinstance(obj, MarkdownView):
            obj.metadata.uid = new_uid
            obj.metadata.resource_version = version
        else:
            meta = obj.setdefault("metadata", {})
            meta["uid"] = new_uid
            meta["resourceVersion"] = version

    def get(self, kind: str, namespace: str, name: str) -> StoredObject:
        """Return a copy of the stored object or raise NotFoundError."""
        with self._lock:
            try:
                return copy.deepcopy(self._objects[(kind, namespace, name)])
            except KeyError:
                raise NotFoundError(kind, namespace, name) from None

    def create(self, kind: str, obj: StoredObject) -> StoredObject:
        """Store a new object; raise ValueError if it already exists."""
        namespace, name = _object_key(obj)
        key = (kind, namespace, name)
        with self._lock:
            if key in self._objects:
                raise ValueError(f'{kind} "{name}" already exists in namespace "{namespace}"')
            stored = copy.deepcopy(obj)
            self._stamp(stored)
            self._objects[key] = stored
            return copy.deepcopy(stored)

    def update(self, kind: str, obj: StoredObject) -> StoredObject:
        """Replace an existing object.

        The status of a MarkdownView is kept; it changes only through update_status.
        """
        namespace, name = _object_key(obj)
        key = (kind, namespace, name)
        with self._lock:
            current = self._objects.get(key)
            if current is None:
                raise NotFoundError(kind, namespace, name)
            stored = copy.deepcopy(obj)
            if isinstance(stored, MarkdownView) and isinstance(current, MarkdownView):
                stored.status = copy.deepcopy(current.status)
            self._stamp(stored, uid=_uid_of(current))
            self._objects[key] = stored
            return copy.deepcopy(stored)

    def apply(self, kind: str, obj: dict, field_manager: str) -> dict:
        """Create or merge an applied configuration, forcing ownership.

        The configuration last applied by each manager is kept under
        ``metadata.managedFields``.
        """
        if not isinstance(obj, dict):
            raise TypeError("apply takes an unstructured (dict) configuration")
        applied = copy.deepcopy(obj)
        applied.get("metadata", {}).pop("managedFields", None)
        namespace, name = _object_key(applied)
        key = (kind, namespace, name)
        with self._lock:
            current = self._objects.get(key)
            if current is None:
                stored: dict[str, Any] = copy.deepcopy(applied)
                uid = ""
            else:
                stored = copy.deepcopy(current)
                uid = _uid_of(current)
                _merge(stored, applied)
            meta = stored.setdefault("metadata", {})
            entries = [e for e in meta.get("managedFields", []) if e["manager"] != field_manager]
            entries.append(
                {"manager": field_manager, "operation": "Apply", "applied": copy.deepcopy(applied)}
            )
            meta["managedFields"] = entries
            self._stamp(stored, uid=uid)
            self._objects[key] = stored
            return copy.deepcopy(stored)

    def delete(self, kind: str, namespace: str, name: str) -> None:
        """Remove an object or raise NotFoundError."""
        with self._lock:
            try:
                del self._objects[(kind, namespace, name)]
            except KeyError:
                raise NotFoundError(kind, namespace, name) from None

    def list(self, kind: str, namespace: str | None = None) -> list[StoredObject]:
        """Return copies of all objects of a kind, optionally in one namespace."""
        with self._lock:
            found = [
                (key, obj)
                for key, obj in self._objects.items()
                if key[0] == kind and (namespace is None or key[1] == namespace)
            ]
            return [copy.deepcopy(obj) for _, obj in sorted(found, key=lambda item: item[0])]

    def update_status(self, view: MarkdownView) -> MarkdownView:
        """Replace only the status of a stored MarkdownView."""
        key = (MARKDOWN_VIEW, view.namespace, view.name)
        with self._lock:
            current = self._objects.get(key)
            if current is None:
                raise NotFoundError(MARKDOWN_VIEW, view.namespace, view.name)
            current.status = copy.deepcopy(view.status)
            self._stamp(current)
            return copy.deepcopy(current)