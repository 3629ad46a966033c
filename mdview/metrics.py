"""Gauge metrics exported by the controller."""

from __future__ import annotations

import threading
from collections.abc import Iterator

METRICS_NAMESPACE = "markdownview"


class GaugeVec:
    """A family of gauges partitioned by label values."""

    def __init__(
        self,
        name: str,
        help_text: str,
        label_names: tuple[str, ...] | list[str],
        namespace: str = "",
    ) -> None:
        self.name = name
        self.help = help_text
        self.label_names = tuple(label_names)
        self.namespace = namespace
        self._values: dict[tuple[str, ...], float] = {}
        self._lock = threading.Lock()

    @property
    def full_name(self) -> str:
        return f"{self.namespace}_{self.name}" if self.namespace else self.name

    def _labels(self, args: tuple[str, ...]) -> tuple[str, ...]:
        if len(args) != len(self.label_names):
            raise ValueError(
                f"{self.full_name}: expected {len(self.label_names)} label values, got {len(args)}"
            )
        return tuple(args)

    def set(self, value: float, *args: str) -> None:
        """Set the gauge identified by the label values."""
        labels = self._labels(args)
        with self._lock:
            self._values[labels] = float(value)

    def value(self, *args: str) -> float | None:
        """Return the gauge's value, or None if it has not been set."""
        labels = self._labels(args)
        with self._lock:
            return self._values.get(labels)

    def delete_label_values(self, *args: str) -> bool:
        """Remove the gauge; return whether it existed."""
        labels = self._labels(args)
        with self._lock:
            return self._values.pop(labels, None) is not None

    def __iter__(self) -> Iterator[tuple[tuple[str, ...], float]]:
        with self._lock:
            snapshot = sorted(self._values.items())
        return iter(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)


AVAILABLE_VEC = GaugeVec(
    name="available",
    help_text="The cluster status about available condition",
    label_names=("name", "namespace"),
    namespace=METRICS_NAMESPACE,
)