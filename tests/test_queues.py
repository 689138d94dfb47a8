# ===============================================
# tests/test_queues.py
# Close/drain semantics of ClosableQueue.
# ===============================================

import threading
import time

import pytest

from src.pipeline.queues import ClosableQueue, QueueClosed


def _start(target):
    t = threading.Thread(target=target, daemon=True)
    t.start()
    return t


def test_fifo_order():
    q = ClosableQueue()
    for i in range(5):
        q.put(i)
    assert [q.get() for _ in range(5)] == [0, 1, 2, 3, 4]


def test_put_after_close_raises():
    q = ClosableQueue()
    q.close()
    with pytest.raises(QueueClosed):
        q.put("late")
    assert q.closed


def test_queued_items_survive_close():
    q = ClosableQueue(maxsize=10)
    for i in range(3):
        q.put(i)
    q.close()
    assert list(q) == [0, 1, 2]
    with pytest.raises(QueueClosed):
        q.get()


def test_close_wakes_blocked_consumer():
    q = ClosableQueue()
    outcome = []

    def consume():
        try:
            q.get()
        except QueueClosed:
            outcome.append("closed")

    t = _start(consume)
    time.sleep(0.05)
    q.close()
    t.join(timeout=2)
    assert not t.is_alive()
    assert outcome == ["closed"]


def test_bounded_put_blocks_until_space():
    q = ClosableQueue(maxsize=1)
    q.put("first")
    t = _start(lambda: q.put("second"))
    time.sleep(0.05)
    assert t.is_alive()
    assert q.qsize() == 1

    assert q.get() == "first"
    t.join(timeout=2)
    assert not t.is_alive()
    assert q.get() == "second"


def test_close_wakes_blocked_producer():
    q = ClosableQueue(maxsize=1)
    q.put("first")
    outcome = []

    def produce():
        try:
            q.put("second")
        except QueueClosed:
            outcome.append("rejected")

    t = _start(produce)
    time.sleep(0.05)
    q.close()
    t.join(timeout=2)
    assert outcome == ["rejected"]
    assert list(q) == ["first"]


def test_many_consumers_take_each_item_once():
    q = ClosableQueue(maxsize=4)
    taken = []
    lock = threading.Lock()

    def consume():
        for item in q:
            with lock:
                taken.append(item)

    consumers = [_start(consume) for _ in range(4)]
    for i in range(100):
        q.put(i)
    q.close()
    for t in consumers:
        t.join(timeout=5)
    assert sorted(taken) == list(range(100))
