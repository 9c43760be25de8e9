import threading

from src.settlement_engine.settlement_engine.common.locks import KeyedLock


def test_lock_is_dropped_after_release():
    locks = KeyedLock()

    with locks.hold("stu-1"):
        with locks.hold("stu-2"):
            assert len(locks) == 2
    assert len(locks) == 0


def test_lock_is_dropped_after_exception():
    locks = KeyedLock()
    try:
        with locks.hold("stu-1"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert len(locks) == 0


def test_same_key_is_serialized_across_threads():
    locks = KeyedLock()
    inside = []
    overlaps = []

    def work():
        for _ in range(200):
            with locks.hold("t-1"):
                inside.append(1)
                if len(inside) > 1:
                    overlaps.append(1)
                inside.pop()

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []
    assert len(locks) == 0
