from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pandas as pd
import pytest

from yushan_admin.core.exceptions import ConfigError
from yushan_admin.services.user_service import UserService, UserServiceManager


def _make_csv(tmp_path):
    path = tmp_path / "users.csv"
    path.write_text(
        "id,username,email,user_type,status,verified\n"
        "1,alice,alice@example.com,reader,active,true\n"
        "2,bob,bob@example.com,writer,active,false\n"
        "3,carol,,writer,banned,true\n"
    )
    return path


def test_from_csv_records(tmp_path):
    service = UserService.from_csv(_make_csv(tmp_path))

    records = service.records()

    assert len(service) == 3
    assert records[0]["username"] == "alice"
    assert records[0]["verified"] is True
    assert records[2]["email"] is None
    assert "disabled" not in records[0]
    assert list(records[0]) == ["id", "username", "email", "user_type", "status", "verified"]


def test_get_users_pages_and_filters(tmp_path):
    service = UserService.from_csv(_make_csv(tmp_path))

    page = service.get_users(page=2, limit=2)
    assert page["success"] is True
    assert page["total"] == 3
    assert [r["id"] for r in page["data"]] == [3]

    writers = service.get_users(user_type="writer", search="B")
    assert [r["username"] for r in writers["data"]] == ["bob"]


def test_bulk_update_actions(tmp_path):
    service = UserService.from_csv(_make_csv(tmp_path))

    assert service.bulk_update("ban_users", [1, 2]) == {"success": True, "updated": 2}
    assert service.frame.set_index("id").loc[1, "status"] == "banned"

    service.bulk_update("flag", [3])
    assert service.frame.set_index("id").loc[3, "flagged"]

    service.bulk_update("delete", [2])
    assert list(service.frame["id"]) == [1, 3]


def test_bulk_update_errors(tmp_path):
    service = UserService.from_csv(_make_csv(tmp_path))
    with pytest.raises(KeyError):
        service.bulk_update("approve", [99])
    with pytest.raises(ValueError):
        service.bulk_update("promote", [1])



def test_concurrent_bulk_updates_are_serialized(tmp_path):
    service = UserService.from_csv(_make_csv(tmp_path))

    with ThreadPoolExecutor(max_workers=4) as pool:
        futures = [
            pool.submit(service.bulk_update, "delete", [1]),
            pool.submit(service.bulk_update, "approve", [3]),
            pool.submit(service.bulk_update, "flag", [2, 3]),
        ]
        results = [f.result() for f in futures]

    assert [r["updated"] for r in results] == [1, 1, 2]
    frame = service.frame.set_index("id")
    assert list(frame.index) == [2, 3]
    assert frame.loc[3, "status"] == "active"
    assert frame.loc[2, "flagged"] and frame.loc[3, "flagged"]


def test_bulk_update_waits_for_running_update(tmp_path):
    service = UserService.from_csv(_make_csv(tmp_path))
    done = threading.Event()

    def run():
        service.bulk_update("reject", [2])
        done.set()

    with service._lock:
        worker = threading.Thread(target=run)
        worker.start()
        assert not done.wait(0.1)
    worker.join(timeout=5)

    assert done.is_set()
    assert service.frame.set_index("id").loc[2, "status"] == "rejected"

def test_row_key_must_be_unique():
    with pytest.raises(ConfigError):
        UserService(pd.DataFrame({"id": [1, 1]}))
    with pytest.raises(ConfigError):
        UserService(pd.DataFrame({"uuid": [1]}))


def test_manager_loads_lazily(tmp_path):
    manager = UserServiceManager({"users": _make_csv(tmp_path)})

    assert not manager.is_loaded("users")
    assert len(manager["users"]) == 3
    assert manager.is_loaded("users")
    with pytest.raises(KeyError):
        manager["novels"]
