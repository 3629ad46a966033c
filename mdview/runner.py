"""Periodic re-enqueueing of every MarkdownView."""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol

from mdview.api import KIND as MARKDOWN_VIEW


class _Channel(Protocol):
    def put(self, item: Any) -> None: ...


class Runner:
    """Every interval, sends a copy of each MarkdownView to a channel."""

    def __init__(
        self,
        client: Any,
        interval: float,
        channel: _Channel,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.interval = interval
        self.channel = channel
        self.logger = logger if logger is not None else logging.getLogger("Runner")

    def start(self, stop: threading.Event) -> None:
        """Notify once per interval until ``stop`` is set."""
        while not stop.wait(self.interval):
            self.notify()

    def notify(self) -> None:
        """Send a copy of every MarkdownView; log and skip if listing fails."""
        try:
            views = self.client.list(MARKDOWN_VIEW)
        except Exception:
            self.logger.exception("failed to list MarkdownView")
            return
        for view in views:
            self.channel.put(view.deep_copy())

    def need_leader_election(self) -> bool:
        """Only the elected leader runs this."""
        return True