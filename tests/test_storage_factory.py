import threading
import time

import pytest

from upload_gateway.core.config import Settings
from upload_gateway.integrations.storage import factory


@pytest.fixture()
def fresh_factory(monkeypatch):
    monkeypatch.setattr(factory, "_storage", None)
    monkeypatch.setattr(factory, "get_settings", lambda: Settings(_env_file=None, storage_provider="s3"))
    return factory


def test_concurrent_first_use_builds_one_handle(fresh_factory, monkeypatch):
    constructions = []

    class SlowStorage:
        def __init__(self, settings):
            constructions.append(settings)
            time.sleep(0.05)

    monkeypatch.setattr(fresh_factory, "S3MultipartStorage", SlowStorage)

    barrier = threading.Barrier(8)
    results = []

    def worker():
        barrier.wait()
        results.append(fresh_factory.get_storage())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(constructions) == 1
    assert len(results) == 8
    assert all(r is results[0] for r in results)


def test_handle_is_reused(fresh_factory):
    assert fresh_factory.get_storage() is fresh_factory.get_storage()


def test_r2_without_endpoint_is_rejected(fresh_factory, monkeypatch):
    monkeypatch.setattr(
        fresh_factory,
        "get_settings",
        lambda: Settings(_env_file=None, storage_provider="r2", r2_account_id="", s3_endpoint=""),
    )
    with pytest.raises(ValueError):
        fresh_factory.get_storage()
    assert fresh_factory._storage is None
