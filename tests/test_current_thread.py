import threading
from concurrent.futures import ThreadPoolExecutor

from reactornet.current_thread import tid


def test_tid_is_stable():
    values = [tid() for _ in range(3)]
    assert values == [threading.get_native_id()] * 3


def test_tid_matches_native_id():
    assert tid() == threading.get_native_id()


def test_tid_differs_between_live_threads():
    with ThreadPoolExecutor(max_workers=1) as executor:
        worker_tid = executor.submit(tid).result(timeout=5)
        worker_native = executor.submit(threading.get_native_id).result(timeout=5)
        worker_tid_again = executor.submit(tid).result(timeout=5)
        main_tid = tid()

    assert worker_tid == worker_native
    assert worker_tid_again == worker_tid
    assert main_tid == threading.get_native_id()
    assert worker_tid != main_tid


def test_tid_positive():
    assert tid() > 0