"""Resource types of the view.zoetrope.github.io/v1 API group."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with its version."""

    group: str
    version: str

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


GROUP_VERSION = GroupVersion(group="view.zoetrope.github.io", version="v1")
KIND = "MarkdownView"
LIST_KIND = "MarkdownViewList"

TYPE_MARKDOWN_VIEW_AVAILABLE = "Available"
TYPE_MARKDOWN_VIEW_DEGRADED = "Degraded"


class ConditionStatus(str, Enum):
    """Status of a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


@dataclass
class Condition:
    """One observation of an aspect of a resource's state."""

    type: str
    status: ConditionStatus
    reason: str = ""
    message: str = ""
    observed_generation: int = 0
    last_transition_time: datetime | None = None


@dataclass
class ObjectMeta:
    """Metadata shared by every stored object."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    owner_references: list[dict] = field(default_factory=list)
    deletion_timestamp: datetime | None = None
    resource_version: str = ""


@dataclass
class MarkdownViewSpec:
    """Desired state of a MarkdownView.

    ``markdowns`` maps file names to markdown content; ``replicas`` is the
    number of viewers and ``viewer_image`` the image that serves them.
    """

    markdowns: dict[str, str] = field(default_factory=dict)
    replicas: int = 1
    viewer_image: str = ""


@dataclass
class MarkdownViewStatus:
    """Observed state of a MarkdownView."""

    conditions: list[Condition] = field(default_factory=list)


@dataclass
class MarkdownView:
    """A set of markdown documents served by a viewer deployment."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: MarkdownViewSpec = field(default_factory=MarkdownViewSpec)
    status: MarkdownViewStatus = field(default_factory=MarkdownViewStatus)

    api_version = str(GROUP_VERSION)
    kind = KIND

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    def deep_copy(self) -> MarkdownView:
        """Return an independent copy of this object."""
        return copy.deepcopy(self)


@dataclass
class MarkdownViewList:
    """A list of MarkdownView objects."""

    items: list[MarkdownView] = field(default_factory=list)

    api_version = str(GROUP_VERSION)
    kind = LIST_KIND


def find_status_condition(
    conditions: list[Condition], condition_type: str
) -> Condition | None:
    """Return the condition of the given type, or None."""
    return next((c for c in conditions if c.type == condition_type), None)


def set_status_condition(conditions: list[Condition], condition: Condition) -> bool:
    """Add or update a condition in place; return whether anything changed.

    The transition time only moves when the status changes.
    """
    existing = find_status_condition(conditions, condition.type)
    if existing is None:
        new = copy.copy(condition)
        if new.last_transition_time is None:
            new.last_transition_time = datetime.now(timezone.utc)
        conditions.append(new)
        return True

    changed = False
    if existing.status != condition.status:
        existing.status = condition.status
        existing.last_transition_time = (
            condition.last_transition_time or datetime.now(timezone.utc)
        )
        changed = True
    if existing.reason != condition.reason:
        existing.reason = condition.reason
        changed = True
    if existing.message != condition.message:
        existing.message = condition.message
        changed = True
    if existing.observed_generation != condition.observed_generation:
        existing.observed_generation = condition.observed_generation
        changed = True
    return changed


def is_status_condition_true(conditions: list[Condition], condition_type: str) -> bool:
    """Whether the condition of the given type is present with status True."""
    found = find_status_condition(conditions, condition_type)
    return found is not None and found.status == ConditionStatus.TRUE


def is_status_condition_false(conditions: list[Condition], condition_type: str) -> bool:
    """Whether the condition of the given type is present with status False."""
    found = find_status_condition(conditions, condition_type)
    return found is not None and found.status == ConditionStatus.FALSE