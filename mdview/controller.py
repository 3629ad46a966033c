"""Reconciliation of MarkdownView objects into their viewer resources."""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass

from mdview.api import (
    KIND as MARKDOWN_VIEW,
)
from mdview.api import (
    TYPE_MARKDOWN_VIEW_AVAILABLE,
    TYPE_MARKDOWN_VIEW_DEGRADED,
    Condition,
    ConditionStatus,
    MarkdownView,
    is_status_condition_false,
    is_status_condition_true,
    set_status_condition,
)
from mdview.cluster import CONFIG_MAP, DEPLOYMENT, SERVICE, InMemoryClient, NotFoundError
from mdview.manifests import (
    CONFIG_MAP_PREFIX,
    FIELD_MANAGER,
    VIEWER_PREFIX,
    build_config_map_data,
    build_deployment,
    build_service,
    controller_reference,
)
from mdview.metrics import AVAILABLE_VEC, GaugeVec

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"

log = logging.getLogger("markdownview-controller")


@dataclass(frozen=True)
class Request:
    """Identifies the MarkdownView to reconcile."""

    namespace: str
    name: str


@dataclass(frozen=True)
class Result:
    """Outcome of one reconciliation."""

    requeue: bool = False


@dataclass(frozen=True)
class Event:
    """An event recorded against an object."""

    kind: str
    namespace: str
    name: str
    event_type: str
    reason: str
    message: str


class EventRecorder:
    """Keeps the events emitted by the controller in order."""

    def __init__(self) -> None:
        self.events: list[Event] = []
        self._lock = threading.Lock()

    def event(self, obj: MarkdownView, event_type: str, reason: str, message: str) -> None:
        """Record an event about the given object."""
        recorded = Event(
            kind=obj.kind,
            namespace=obj.namespace,
            name=obj.name,
            event_type=event_type,
            reason=reason,
            message=message,
        )
        with self._lock:
            self.events.append(recorded)
        log.info("event %s %s: %s", event_type, reason, message)


def _api_group(api_version: str) -> str:
    return api_version.rpartition("/")[0]


def _same_owner(ref: dict, owner: dict) -> bool:
    return (
        _api_group(ref.get("apiVersion", "")) == _api_group(owner.get("apiVersion", ""))
        and ref.get("kind") == owner.get("kind")
        and ref.get("name") == owner.get("name")
    )


def _set_controller_reference(obj: dict, owner: dict) -> None:
    meta = obj.setdefault("metadata", {})
    refs = meta.setdefault("ownerReferences", [])
    for ref in refs:
        if ref.get("controller") and not _same_owner(ref, owner):
            raise ValueError(
                f"Object {meta.get('namespace', '')}/{meta.get('name', '')} is already owned "
                f"by another {ref.get('kind')} controller {ref.get('name')}"
            )
    refs[:] = [ref for ref in refs if not _same_owner(ref, owner)]
    refs.append(dict(owner))


def _extract(obj: dict, field_manager: str) -> dict | None:
    entries = obj.get("metadata", {}).get("managedFields", [])
    entry = next((e for e in entries if e.get("manager") == field_manager), None)
    return None if entry is None else entry.get("applied")


class MarkdownViewReconciler:
    """Drives the cluster towards the state a MarkdownView describes."""

    def __init__(
        self,
        client: InMemoryClient,
        recorder: EventRecorder | None = None,
        metrics: GaugeVec | None = None,
    ) -> None:
        self.client = client
        self.recorder = recorder if recorder is not None else EventRecorder()
        self.metrics = metrics if metrics is not None else AVAILABLE_VEC

    def reconcile(self, request: Request) -> Result:
        """Reconcile one MarkdownView; raise if a resource could not be set up."""
        log.info("start reconcile MarkdownView %s/%s", request.namespace, request.name)
        try:
            view = self.client.get(MARKDOWN_VIEW, request.namespace, request.name)
        except NotFoundError:
            self.metrics.delete_label_values(request.name, request.namespace)
            return Result()

        if view.metadata.deletion_timestamp is not None:
            return Result()

        steps = (self._reconcile_config_map, self._reconcile_deployment, self._reconcile_service)
        for step in steps:
            try:
                step(view)
            except Exception:
                try:
                    self._update_status(view)
                except Exception:
                    log.exception("unable to update status")
                raise
        return self._update_status(view)

    def _reconcile_config_map(self, view: MarkdownView) -> None:
        name = CONFIG_MAP_PREFIX + view.name
        current = self._fetch(CONFIG_MAP, view.namespace, name)
        if current is None:
            desired: dict = {
                "apiVersion": "v1",
                "kind": "ConfigMap",
                "metadata": {"name": name, "namespace": view.namespace},
            }
        else:
            desired = copy.deepcopy(current)
        desired["data"] = build_config_map_data(view, desired.get("data"))
        _set_controller_reference(desired, controller_reference(view))

        if current is None:
            self.client.create(CONFIG_MAP, desired)
            log.info("reconcile ConfigMap successfully op=created")
        elif desired != current:
            self.client.update(CONFIG_MAP, desired)
            log.info("reconcile ConfigMap successfully op=updated")

    def _apply(self, kind: str, desired: dict) -> None:
        meta = desired["metadata"]
        current = self._fetch(kind, meta["namespace"], meta["name"])
        if current is not None and _extract(current, FIELD_MANAGER) == desired:
            return
        self.client.apply(kind, desired, FIELD_MANAGER)
        log.info("reconcile %s successfully name=%s", kind, meta["name"])

    def _reconcile_deployment(self, view: MarkdownView) -> None:
        self._apply(DEPLOYMENT, build_deployment(view, controller_reference(view)))

    def _reconcile_service(self, view: MarkdownView) -> None:
        self._apply(SERVICE, build_service(view, controller_reference(view)))

    def _fetch(self, kind: str, namespace: str, name: str) -> dict | None:
        try:
            return self.client.get(kind, namespace, name)
        except NotFoundError:
            return None

    def _update_status(self, view: MarkdownView) -> Result:
        previous = copy.deepcopy(view.status.conditions)
        conditions = view.status.conditions

        set_status_condition(
            conditions,
            Condition(type=TYPE_MARKDOWN_VIEW_AVAILABLE, status=ConditionStatus.TRUE, reason="OK"),
        )
        set_status_condition(
            conditions,
            Condition(type=TYPE_MARKDOWN_VIEW_DEGRADED, status=ConditionStatus.FALSE, reason="OK"),
        )

        deployment = None
        checks = (
            (CONFIG_MAP, CONFIG_MAP_PREFIX + view.name, "ConfigMap"),
            (SERVICE, VIEWER_PREFIX + view.name, "Service"),
            (DEPLOYMENT, VIEWER_PREFIX + view.name, "Deployment"),
        )
        for kind, name, label in checks:
            found = self._fetch(kind, view.namespace, name)
            if found is None:
                set_status_condition(
                    conditions,
                    Condition(
                        type=TYPE_MARKDOWN_VIEW_DEGRADED,
                        status=ConditionStatus.TRUE,
                        reason="Reconciling",
                        message=f"{label} not found",
                    ),
                )
                set_status_condition(
                    conditions,
                    Condition(
                        type=TYPE_MARKDOWN_VIEW_AVAILABLE,
                        status=ConditionStatus.FALSE,
                        reason="Reconciling",
                    ),
                )
            if kind == DEPLOYMENT:
                deployment = found

        result = Result()
        available = (deployment or {}).get("status", {}).get("availableReplicas", 0)
        if not available:
            set_status_condition(
                conditions,
                Condition(
                    type=TYPE_MARKDOWN_VIEW_AVAILABLE,
                    status=ConditionStatus.FALSE,
                    reason="Unavailable",
                    message="AvailableReplicas is 0",
                ),
            )
            result = Result(requeue=True)

        self._set_metrics(view)

        if is_status_condition_false(previous, TYPE_MARKDOWN_VIEW_DEGRADED) and is_status_condition_true(
            conditions, TYPE_MARKDOWN_VIEW_DEGRADED
        ):
            self.recorder.event(
                view,
                EVENT_TYPE_WARNING,
                "Degraded",
                f"MarkdownView({view.namespace}:{view.name}) degraded",
            )
        if is_status_condition_false(previous, TYPE_MARKDOWN_VIEW_AVAILABLE) and is_status_condition_true(
            conditions, TYPE_MARKDOWN_VIEW_AVAILABLE
        ):
            self.recorder.event(
                view,
                EVENT_TYPE_NORMAL,
                "Available",
                f"MarkdownView({view.namespace}:{view.name}) available",
            )

        self.client.update_status(view)
        return result

    def _set_metrics(self, view: MarkdownView) -> None:
        available = is_status_condition_true(view.status.conditions, TYPE_MARKDOWN_VIEW_AVAILABLE)
        self.metrics.set(1.0 if available else 0.0, view.name, view.namespace)