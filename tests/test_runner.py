import queue
import threading

from mdview.api import KIND, MarkdownView, MarkdownViewSpec, ObjectMeta
from mdview.cluster import InMemoryClient
from mdview.runner import Runner


def make_client(*names):
    client = InMemoryClient()
    for name in names:
        client.create(
            KIND,
            MarkdownView(
                metadata=ObjectMeta(name=name, namespace="test"),
                spec=MarkdownViewSpec(markdowns={"SUMMARY.md": "summary"}),
            ),
        )
    return client


class FailingClient:
    def list(self, kind, namespace=None):
        raise RuntimeError("list failed")


def drain(q):
    items = []
    while True:
        try:
            items.append(q.get_nowait())
        except queue.Empty:
            return items


def test_notify_sends_every_view():
    client = make_client("a", "b")
    q = queue.Queue()
    Runner(client, 30, q).notify()
    sent = drain(q)
    assert [v.name for v in sent] == ["a", "b"]


def test_notify_sends_copies():
    client = make_client("a")
    q = queue.Queue()
    Runner(client, 30, q).notify()
    sent = q.get_nowait()
    sent.spec.markdowns["extra.md"] = "x"
    assert "extra.md" not in client.get(KIND, "test", "a").spec.markdowns


def test_notify_with_list_failure_sends_nothing():
    q = queue.Queue()
    Runner(FailingClient(), 30, q).notify()
    assert q.empty()


def test_start_returns_when_stopped():
    client = make_client("a")
    q = queue.Queue()
    stop = threading.Event()
    stop.set()
    Runner(client, 0.01, q).start(stop)
    assert q.empty()


def test_start_notifies_periodically():
    client = make_client("a")
    q = queue.Queue()
    stop = threading.Event()
    runner = Runner(client, 0.01, q)
    thread = threading.Thread(target=runner.start, args=(stop,))
    thread.start()
    try:
        first = q.get(timeout=2)
        second = q.get(timeout=2)
    finally:
        stop.set()
        thread.join(timeout=2)
    assert first.name == "a"
    assert second.name == "a"
    assert not thread.is_alive()


def test_needs_leader_election():
    assert Runner(make_client(), 30, queue.Queue()).need_leader_election() is True