"""Tests for the reader/writer lock."""

import threading

from task_service.rwlock import ReadWriteLock


def test_readers_share_the_lock() -> None:
    lock = ReadWriteLock()
    both_inside = threading.Barrier(2, timeout=2)

    def reader() -> None:
        with lock.read_locked():
            both_inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert not both_inside.broken


def test_writer_excludes_readers() -> None:
    lock = ReadWriteLock()
    acquired = threading.Event()

    def reader() -> None:
        with lock.read_locked():
            acquired.set()

    with lock.write_locked():
        t = threading.Thread(target=reader)
        t.start()
        assert not acquired.wait(0.1)

    assert acquired.wait(2)
    t.join(timeout=2)


def test_writer_waits_for_readers() -> None:
    lock = ReadWriteLock()
    acquired = threading.Event()

    def writer() -> None:
        with lock.write_locked():
            acquired.set()

    with lock.read_locked():
        t = threading.Thread(target=writer)
        t.start()
        assert not acquired.wait(0.1)

    assert acquired.wait(2)
    t.join(timeout=2)


def test_lock_released_on_error() -> None:
    lock = ReadWriteLock()

    try:
        with lock.write_locked():
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    with lock.write_locked():
        pass
