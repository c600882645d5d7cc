"""主键生成器测试。"""

import threading

from ftprovider.core.ids import ClockIdGenerator, SequenceIdGenerator, non_negative


def test_clock_ids_are_strictly_increasing_within_same_millisecond():
    generator = ClockIdGenerator(clock=lambda: 1_700_000_000.0)
    first, second, third = generator(), generator(), generator()
    assert first == 1_700_000_000_000
    assert second == first + 1
    assert third == first + 2


def test_clock_ids_never_negative():
    generator = ClockIdGenerator(clock=lambda: -5.0)
    assert generator() == 5000


def test_clock_ids_unique_across_threads():
    generator = ClockIdGenerator()
    results: list[int] = []
    lock = threading.Lock()

    def worker() -> None:
        values = [generator() for _ in range(200)]
        with lock:
            results.extend(values)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 800
    assert len(set(results)) == 800
    assert all(value >= 0 for value in results)


def test_sequence_generator():
    generator = SequenceIdGenerator(10)
    assert [generator(), generator(), generator()] == [10, 11, 12]


def test_non_negative():
    assert non_negative(-12) == 12
    assert non_negative(0) == 0
    assert non_negative(9) == 9
