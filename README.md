# mdview

`mdview` holds the logic of a controller for **MarkdownView** resources. A
MarkdownView names a set of markdown files. A number of mdbook viewer replicas
serve those files. The package needs only the standard library.

## Modules

### `mdview.api`: the resource model

- The resource types are `MarkdownView`, `MarkdownViewSpec`,
  `MarkdownViewStatus`, `MarkdownViewList`, `ObjectMeta` and `Condition`.
- The group and version are `GroupVersion`. The value used is
  `view.zoetrope.github.io/v1`.
- `ConditionStatus` is an enum with the members `TRUE`, `FALSE` and `UNKNOWN`.
- `MarkdownView.deep_copy()` returns an independent copy of a view.
- There are helpers for status conditions:
  - `find_status_condition(conditions, type)`
  - `set_status_condition(conditions, condition)`. It adds or updates a
    condition in place and returns whether anything changed. The transition
    time only moves when the status changes.
  - `is_status_condition_true(conditions, type)`
  - `is_status_condition_false(conditions, type)`

### `mdview.webhook`: admission logic

- `default(view)` fills in the viewer image when it is empty. The default is
  `peaceiris/mdbook:latest`.
- `validate_create(view)` and `validate_update(view, old)` check the view.
  Replicas must be between 1 and 5. The markdowns must include `SUMMARY.md`.
  Both return a list of warnings, which is always empty.
- A failed check raises `InvalidError`. Its `errors` attribute holds one
  `FieldError` for each problem.
- `validate_delete(view)` always allows deletion.

### `mdview.manifests`: desired state

- `controller_reference(view)` builds the owner reference.
- `build_config_map_data(view, existing)` returns the ConfigMap data. Existing
  keys are kept and the view's markdowns are laid over them.
- `build_deployment(view, owner)` builds the `viewer-<name>` Deployment as a
  plain dict. The Deployment runs `mdbook serve` on port 3000 and mounts the
  `markdowns-<name>` ConfigMap.
- `build_service(view, owner)` builds the `viewer-<name>` Service as a plain
  dict. The Service maps port 80 to port 3000.
- `index_by_owner_markdown_view(obj)` returns the name of the MarkdownView that
  controls an object.

### `mdview.cluster`: an in-memory store

- `InMemoryClient` stores `MarkdownView` objects and plain-dict resources by
  kind, namespace and name.
- It provides `get`, `create`, `update`, `apply` (server-side-apply style, with
  a field manager), `delete`, `list` and `update_status`.
- Every read returns a copy.
- A missing object raises `NotFoundError`.
- Creating an object that already exists raises `ValueError`.

### `mdview.controller`: reconciliation

`MarkdownViewReconciler(client, recorder=None, metrics=None)` has one method,
`reconcile(Request(namespace, name))`. It returns a `Result` and works in this
order:

1. It creates or updates the ConfigMap.
2. It applies the Deployment and the Service, skipping any whose applied
   configuration is unchanged.
3. It sets the view's `Available` and `Degraded` conditions and stores the new
   status.

`Result.requeue` is true while the Deployment reports no available replicas.
If a resource cannot be set up, the status is still updated and the error is
raised.

When a view is degraded or becomes available, the reconciler records a
`Warning` or `Normal` `Event` on its `EventRecorder`.

If the view is gone, the reconciler removes its gauge.

### `mdview.metrics`: gauges

`GaugeVec` is a gauge with labels. It provides `set(value, *labels)`,
`value(*labels)` and `delete_label_values(*labels)`, and it can be iterated.
`AVAILABLE_VEC` (`markdownview_available`, labelled by name and namespace)
records 1 when a view is available and 0 when it is not. The reconciler uses
it unless it is given another gauge.

### `mdview.runner`: periodic requeue

`Runner(client, interval, channel)` has these methods:

- `start(stop)` runs until the `threading.Event` named `stop` is set. Every
  `interval` seconds it calls `notify()`.
- `notify()` lists all views and puts a copy of each one on `channel`. Any
  object with a `put` method will do, such as a `queue.Queue`. If listing
  fails, it logs the error and returns.

## Example

```python
from mdview.api import MarkdownView, MarkdownViewSpec, ObjectMeta
from mdview.cluster import InMemoryClient
from mdview.controller import MarkdownViewReconciler, Request
from mdview.webhook import default, validate_create

view = MarkdownView(
    metadata=ObjectMeta(name="sample", namespace="test"),
    spec=MarkdownViewSpec(markdowns={"SUMMARY.md": "summary", "page1.md": "page1"}, replicas=3),
)
default(view)
validate_create(view)

client = InMemoryClient()
client.create("MarkdownView", view)

reconciler = MarkdownViewReconciler(client)
result = reconciler.reconcile(Request(namespace="test", name="sample"))
# result.requeue is True: the stored Deployment reports no available replicas yet.
```

## What it does not do

- There is no command that starts a controller.
- Nothing connects to a real cluster. The only store is `InMemoryClient`.
- Nothing serves admission webhooks over HTTP. Nothing exposes metrics over
  HTTP.
- Leader election is not implemented. `Runner.need_leader_election()` only
  reports that the runner needs it.
- Nothing drives `reconcile` from watches or from the runner's channel. The
  caller does that.

## Installation and tests

```
pip install ".[test]"
pytest
```