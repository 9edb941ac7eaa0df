"""缓存管理接口测试。"""

from fastapi.testclient import TestClient

API = "/api/v1"


def _warm_folder_cache(client: TestClient, headers) -> str:
    """访问根目录列表，返回写入的缓存键（不含前缀）。"""
    me = client.get(f"{API}/auth/me", headers=headers).json()["data"]
    assert client.get(f"{API}/folders", headers=headers).status_code == 200
    return f"folders:user:{me['id']}:root"


def test_cache_stats_and_keys(client: TestClient, admin_headers):
    key = _warm_folder_cache(client, admin_headers)
    full_key = f"mediahub:filemanager:{key}"
    client.get(f"{API}/folders", headers=admin_headers)

    stats = client.get(f"{API}/cache/stats", headers=admin_headers).json()["data"]
    assert stats["backend"] == "memory"
    assert stats["enabled"] is True
    assert stats["prefix"] == "mediahub:filemanager"
    assert stats["key_count"] >= 1
    assert stats["hits"] >= 1
    assert 0 < stats["hit_rate"] <= 1

    listing = client.get(f"{API}/cache/keys", headers=admin_headers, params={"pattern": "folders:*"}).json()["data"]
    assert full_key in listing["keys"]
    assert listing["total"] == len(listing["keys"])

    detail = client.get(f"{API}/cache/keys/{key}", headers=admin_headers)
    assert detail.status_code == 200
    entry = detail.json()["data"]
    assert entry["key"] == full_key
    assert isinstance(entry["value"], list)
    assert entry["ttl"] > 0

    qualified = client.get(f"{API}/cache/keys/{full_key}", headers=admin_headers)
    assert qualified.json()["data"]["key"] == full_key


def test_delete_cache_entries(client: TestClient, admin_headers):
    key = _warm_folder_cache(client, admin_headers)

    deleted = client.delete(f"{API}/cache/keys/{key}", headers=admin_headers)
    assert deleted.status_code == 200
    assert deleted.json()["data"] == {"deleted": 1}

    again = client.delete(f"{API}/cache/keys/{key}", headers=admin_headers)
    assert again.status_code == 404
    assert again.json()["msg"] == "缓存键不存在"

    assert client.get(f"{API}/cache/keys/{key}", headers=admin_headers).status_code == 404

    _warm_folder_cache(client, admin_headers)
    client.get(f"{API}/folders/tree", headers=admin_headers)
    by_pattern = client.delete(f"{API}/cache/pattern", headers=admin_headers, params={"pattern": "folders-tree:*"})
    assert by_pattern.json()["data"] == {"deleted": 1}

    empty = client.delete(f"{API}/cache/pattern", headers=admin_headers)
    assert empty.status_code == 400
    assert empty.json()["msg"] == "请提供匹配模式"

    flushed = client.delete(f"{API}/cache/flush", headers=admin_headers)
    assert flushed.json()["data"]["deleted"] >= 1
    remaining = client.get(f"{API}/cache/keys", headers=admin_headers).json()["data"]
    assert remaining["total"] == 0


def test_cache_endpoints_require_admin(client: TestClient, register_user):
    _, headers = register_user()
    resp = client.get(f"{API}/cache/stats", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["msg"] == "需要管理员权限"
