"""Defaulting and validation of MarkdownView objects on admission."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mdview.api import GROUP_VERSION, KIND, MarkdownView

DEFAULT_VIEWER_IMAGE = "peaceiris/mdbook:latest"
SUMMARY_FILE = "SUMMARY.md"
MIN_REPLICAS = 1
MAX_REPLICAS = 5

log = logging.getLogger("markdownview-resource")


class FieldErrorType(str, Enum):
    """Kinds of field validation failures."""

    INVALID = "Invalid value"
    REQUIRED = "Required value"


@dataclass(frozen=True)
class FieldError:
    """A validation failure of one field."""

    type: FieldErrorType
    field: str
    detail: str
    bad_value: Any = None

    def __str__(self) -> str:
        if self.type is FieldErrorType.INVALID:
            return f"{self.field}: {self.type.value}: {self.bad_value!r}: {self.detail}"
        return f"{self.field}: {self.type.value}: {self.detail}"


class InvalidError(Exception):
    """Raised when an object fails validation."""

    def __init__(self, kind: str, group: str, name: str, errors: list[FieldError]):
        self.kind = kind
        self.group = group
        self.name = name
        self.errors = list(errors)
        if len(self.errors) == 1:
            details = str(self.errors[0])
        else:
            details = "[" + ", ".join(str(e) for e in self.errors) + "]"
        super().__init__(f'{kind}.{group} "{name}" is invalid: {details}')

    @property
    def message(self) -> str:
        return str(self)


def default(view: MarkdownView) -> MarkdownView:
    """Fill in defaulted fields of the view in place and return it."""
    log.info("default name=%s", view.name)
    if not view.spec.viewer_image:
        view.spec.viewer_image = DEFAULT_VIEWER_IMAGE
    return view


def validate(view: MarkdownView) -> list[str]:
    """Check the view; return warnings or raise InvalidError."""
    errors: list[FieldError] = []

    replicas = view.spec.replicas
    if replicas < MIN_REPLICAS or replicas > MAX_REPLICAS:
        errors.append(
            FieldError(
                type=FieldErrorType.INVALID,
                field="spec.replicas",
                bad_value=replicas,
                detail="replicas must be in the range of 1 to 5.",
            )
        )

    if SUMMARY_FILE not in view.spec.markdowns:
        errors.append(
            FieldError(
                type=FieldErrorType.REQUIRED,
                field="spec.markdowns",
                detail="markdowns must have SUMMARY.md.",
            )
        )

    if errors:
        err = InvalidError(KIND, GROUP_VERSION.group, view.name, errors)
        log.error("validation error name=%s: %s", view.name, err)
        raise err
    return []


def validate_create(view: MarkdownView) -> list[str]:
    """Validate a view that is being created."""
    log.info("validate create name=%s", view.name)
    return validate(view)


def validate_update(view: MarkdownView, old: MarkdownView | None) -> list[str]:
    """Validate a view that is being updated; the old object is not consulted."""
    log.info("validate update name=%s", view.name)
    return validate(view)


def validate_delete(view: MarkdownView) -> list[str]:
    """Deletion is always allowed."""
    log.info("validate delete name=%s", view.name)
    return []