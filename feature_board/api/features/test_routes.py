# feature_board/api/features/test_routes.py
"""
기능 요청 API 라우트 테스트 (Flask test client + JWT)

사용법: python -m pytest feature_board/api/features/test_routes.py -v
"""

BASE = "/api/v1/features/"


def _create(client, headers, title="Dark Mode", description="Night theme"):
    res = client.post(BASE, json={"title": title, "description": description}, headers=headers)
    assert res.status_code == 201, res.get_json()
    return res.get_json()["feature"]


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert "status" in res.get_json()


def test_create_requires_token(client):
    res = client.post(BASE, json={"title": "A"})
    assert res.status_code == 401


def test_create_and_fetch(client, auth_headers):
    feature = _create(client, auth_headers("u1"))

    res = client.get(f"{BASE}{feature['feature_id']}")
    body = res.get_json()

    assert res.status_code == 200
    assert body["feature"]["title"] == "Dark Mode"
    assert body["feature"]["created_by"]["email"] == "alice@example.com"
    assert body["feature"]["comments"] == {"count": 0, "data": []}


def test_create_validation_error(client, auth_headers):
    res = client.post(BASE, json={"description": "no title"}, headers=auth_headers("u1"))
    assert res.status_code == 400
    assert res.get_json()["error_code"] == "VALIDATION_ERROR"
    assert "title" in res.get_json()["details"]


def test_duplicate_title_maps_to_400(client, auth_headers):
    _create(client, auth_headers("u1"), title="Dark Mode")
    res = client.post(BASE, json={"title": "dark mode"}, headers=auth_headers("u2"))
    assert res.status_code == 400
    assert res.get_json()["error_code"] == "DUPLICATE_TITLE"


def test_fetch_missing_maps_to_404(client):
    res = client.get(f"{BASE}does-not-exist")
    assert res.status_code == 404
    assert res.get_json()["error_code"] == "FEATURE_NOT_FOUND"


def test_list_summary_shape(client, auth_headers):
    feature = _create(client, auth_headers("u1"))
    client.patch(f"{BASE}{feature['feature_id']}/comments", json={"comment": "nice"}, headers=auth_headers("u2"))

    res = client.get(BASE)
    features = res.get_json()["features"]

    assert res.status_code == 200
    assert len(features) == 1
    assert features[0]["total_comments"] == 1
    assert "comments" not in features[0]


def test_list_hides_features_of_deleted_creator(app, client, auth_headers):
    feature = _create(client, auth_headers("u3"), title="Carol's idea")
    app.services["users"].mark_deleted("u3")

    assert client.get(BASE).get_json()["features"] == []
    assert client.get(f"{BASE}{feature['feature_id']}").status_code == 200


def test_toggle_like(client, auth_headers):
    feature_id = _create(client, auth_headers("u1"))["feature_id"]

    res = client.patch(f"{BASE}{feature_id}", headers=auth_headers("u2"))
    body = res.get_json()
    assert res.status_code == 200
    assert body["liked"] is True
    assert body["feature"]["likes"]["count"] == 1

    body = client.patch(f"{BASE}{feature_id}", headers=auth_headers("u2")).get_json()
    assert body["liked"] is False
    assert body["feature"]["likes"] == {"count": 0, "users": []}


def test_explicit_like_and_unlike(client, auth_headers):
    feature_id = _create(client, auth_headers("u1"))["feature_id"]
    headers = auth_headers("u2")

    client.post(f"{BASE}{feature_id}/like", headers=headers)
    res = client.post(f"{BASE}{feature_id}/like", headers=headers)
    assert res.get_json()["feature"]["likes"]["count"] == 1

    res = client.delete(f"{BASE}{feature_id}/like", headers=headers)
    assert res.status_code == 200
    assert res.get_json()["feature"]["likes"]["count"] == 0


def test_like_missing_feature(client, auth_headers):
    res = client.post(f"{BASE}missing/like", headers=auth_headers("u2"))
    assert res.status_code == 404


def test_update_status(client, auth_headers):
    feature_id = _create(client, auth_headers("u1"))["feature_id"]

    res = client.patch(f"{BASE}{feature_id}/status", json={"status": "InProgress"}, headers=auth_headers("u2"))
    assert res.status_code == 200
    assert res.get_json()["feature"]["status"] == "InProgress"

    res = client.patch(f"{BASE}{feature_id}/status", json={"status": "Shipped"}, headers=auth_headers("u2"))
    assert res.status_code == 400
    assert "status" in res.get_json()["details"]


def test_comment_add_and_delete_with_ownership(client, auth_headers):
    feature_id = _create(client, auth_headers("u1"))["feature_id"]

    res = client.patch(f"{BASE}{feature_id}/comments", json={"comment": "nice"}, headers=auth_headers("u1"))
    assert res.status_code == 200
    comment = res.get_json()["feature"]["comments"]["data"][0]
    assert comment["comments_by"]["name"] == "Alice"

    url = f"{BASE}{feature_id}/comments/{comment['comment_id']}"
    res = client.delete(url, headers=auth_headers("u2"))
    assert res.status_code == 403
    assert res.get_json()["error_code"] == "FORBIDDEN"

    res = client.delete(url, headers=auth_headers("u1"))
    assert res.status_code == 200
    assert res.get_json()["feature"]["comments"]["count"] == 0

    res = client.delete(url, headers=auth_headers("u1"))
    assert res.status_code == 404
    assert res.get_json()["error_code"] == "COMMENT_NOT_FOUND"


def test_empty_comment_rejected(client, auth_headers):
    feature_id = _create(client, auth_headers("u1"))["feature_id"]
    res = client.patch(f"{BASE}{feature_id}/comments", json={"comment": ""}, headers=auth_headers("u1"))
    assert res.status_code == 400


def test_search(client, auth_headers):
    headers = auth_headers("u1")
    dark = _create(client, headers, title="Dark Mode", description="Night theme")
    _create(client, headers, title="Export CSV", description="Download data")

    res = client.get(f"{BASE}search", query_string={"q": "DARK"})
    features = res.get_json()["features"]
    assert res.status_code == 200
    assert [f["feature_id"] for f in features] == [dark["feature_id"]]
    assert "comments" not in features[0]

    assert client.get(f"{BASE}search", query_string={"q": "zzz"}).get_json()["features"] == []


def test_unknown_route_is_404(client):
    assert client.get("/api/v1/nothing-here").status_code == 404
