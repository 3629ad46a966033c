"""Desired ConfigMap, Deployment and Service objects for a MarkdownView."""

from __future__ import annotations

from mdview.api import GROUP_VERSION, KIND, MarkdownView
from mdview.webhook import DEFAULT_VIEWER_IMAGE

FIELD_MANAGER = "markdown-view-controller"
CONFIG_MAP_PREFIX = "markdowns-"
VIEWER_PREFIX = "viewer-"
OWNER_CONTROLLER_FIELD = ".metadata.ownerReference.controller"


def _labels(view: MarkdownView) -> dict[str, str]:
    return {
        "app.kubernetes.io/name": "mdbook",
        "app.kubernetes.io/instance": view.name,
        "app.kubernetes.io/created-by": FIELD_MANAGER,
    }


def _http_probe() -> dict:
    return {"httpGet": {"port": "http", "path": "/", "scheme": "HTTP"}}


def controller_reference(view: MarkdownView) -> dict:
    """Owner reference that marks the view as the controller of an object."""
    return {
        "apiVersion": str(GROUP_VERSION),
        "kind": KIND,
        "name": view.name,
        "uid": view.metadata.uid,
        "blockOwnerDeletion": True,
        "controller": True,
    }


def build_config_map_data(view: MarkdownView, existing: dict[str, str] | None) -> dict[str, str]:
    """Existing ConfigMap data overlaid with the view's markdowns.

    Keys no longer in the view are kept, as the data is only ever added to.
    """
    data = dict(existing or {})
    data.update(view.spec.markdowns)
    return data


def build_deployment(view: MarkdownView, owner: dict) -> dict:
    """Apply configuration of the viewer Deployment."""
    image = view.spec.viewer_image or DEFAULT_VIEWER_IMAGE
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": VIEWER_PREFIX + view.name,
            "namespace": view.namespace,
            "labels": _labels(view),
            "ownerReferences": [dict(owner)],
        },
        "spec": {
            "replicas": view.spec.replicas,
            "selector": {"matchLabels": _labels(view)},
            "template": {
                "metadata": {"labels": _labels(view)},
                "spec": {
                    "containers": [
                        {
                            "name": "mdbook",
                            "image": image,
                            "imagePullPolicy": "IfNotPresent",
                            "command": ["mdbook"],
                            "args": ["serve", "--hostname", "0.0.0.0"],
                            "volumeMounts": [{"name": "markdowns", "mountPath": "/book/src"}],
                            "ports": [
                                {"name": "http", "protocol": "TCP", "containerPort": 3000}
                            ],
                            "livenessProbe": _http_probe(),
                            "readinessProbe": _http_probe(),
                        }
                    ],
                    "volumes": [
                        {
                            "name": "markdowns",
                            "configMap": {"name": CONFIG_MAP_PREFIX + view.name},
                        }
                    ],
                },
            },
        },
    }


def build_service(view: MarkdownView, owner: dict) -> dict:
    """Apply configuration of the viewer Service."""
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {
            "name": VIEWER_PREFIX + view.name,
            "namespace": view.namespace,
            "labels": _labels(view),
            "ownerReferences": [dict(owner)],
        },
        "spec": {
            "selector": _labels(view),
            "type": "ClusterIP",
            "ports": [{"protocol": "TCP", "port": 80, "targetPort": 3000}],
        },
    }


def index_by_owner_markdown_view(obj: dict) -> list[str]:
    """Names of the MarkdownView controlling a ConfigMap, for field indexing."""
    references = obj.get("metadata", {}).get("ownerReferences", [])
    owner = next((ref for ref in references if ref.get("controller")), None)
    if owner is None:
        return []
    if owner.get("apiVersion") != str(GROUP_VERSION) or owner.get("kind") != KIND:
        return []
    return [owner["name"]]