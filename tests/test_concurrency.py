import random
import threading

from tailquant import CKMSQuantiles, DEFAULT_QUANTILES


def test_concurrent_inserts_keep_exact_count():
    est = CKMSQuantiles(DEFAULT_QUANTILES, buffer_size=97)
    threads = 8
    per_thread = 2500
    snapshots = []

    def producer(seed: int) -> None:
        rng = random.Random(seed)
        for _ in range(per_thread):
            est.insert(rng.randint(0, 1000))

    def reporter() -> None:
        for _ in range(20):
            snapshots.append(est.snapshot())

    workers = [threading.Thread(target=producer, args=(i,)) for i in range(threads)]
    workers.append(threading.Thread(target=reporter))
    for t in workers:
        t.start()
    for t in workers:
        t.join()

    assert est.get_count() == threads * per_thread
    final = est.snapshot()
    assert final is not None
    assert all(0 <= v <= 1000 for v in final.values())
    for snap in snapshots:
        if snap is not None:
            assert list(snap.keys()) == sorted(DEFAULT_QUANTILES)
