from fastapi.testclient import TestClient
from sqlalchemy import text

import main


def test_pageview_behind_proxy(client, store):
    resp = client.post("/api/pageview", headers={"X-Forwarded-For": "1.2.3.4"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True

    row = store.recent_page_views(1)[0]
    assert row["id"] == body["viewId"]
    assert row["ip_address"] == "1.2.3.4"
    for key in ("referrer", "utm_source", "utm_medium", "utm_campaign", "page_url"):
        assert row[key] is None


def test_pageview_forwarded_chain_uses_first_hop(client, store):
    client.post("/api/pageview", json={}, headers={"X-Forwarded-For": "5.6.7.8, 10.0.0.1"})
    assert store.recent_page_views(1)[0]["ip_address"] == "5.6.7.8"


def test_pageview_falls_back_to_socket_address(client, store):
    client.post("/api/pageview", json={})
    row = store.recent_page_views(1)[0]
    assert row["ip_address"] == "testclient"
    assert row["user_agent"] == "testclient"


def test_pageview_stores_campaign_fields(client, store):
    payload = {
        "referrer": "https://news.example.com/",
        "utm_source": "newsletter",
        "utm_medium": "email",
        "utm_campaign": "launch",
        "page_url": "https://smartcap.example/?utm_source=newsletter",
    }
    resp = client.post("/api/pageview", json=payload, headers={"User-Agent": "Mozilla/5.0"})
    assert resp.status_code == 200
    row = store.recent_page_views(1)[0]
    for key, value in payload.items():
        assert row[key] == value
    assert row["user_agent"] == "Mozilla/5.0"


def test_pageview_blank_strings_stored_as_null(client, store):
    client.post("/api/pageview", json={"referrer": "", "utm_source": ""})
    row = store.recent_page_views(1)[0]
    assert row["referrer"] is None
    assert row["utm_source"] is None


def test_pageview_storage_failure(client, store):
    with store.engine.begin() as conn:
        conn.execute(text("DROP TABLE page_views"))
    resp = client.post("/api/pageview", json={})
    assert resp.status_code == 500
    assert resp.json()["success"] is False


def test_stats_defaults_on_empty_store(client):
    resp = client.get("/api/stats")
    assert resp.status_code == 200
    assert resp.json() == {
        "totalLeads": 0,
        "totalPageViews": 0,
        "variants": {},
        "recentLeads": [],
        "recentPageViews": [],
    }


def test_stats_scenario(client):
    client.post("/api/waitlist", json={"name": "Alice", "email": "a@x.com", "ab_headline_variant": "Control"})
    client.post("/api/waitlist", json={"name": "Bob", "email": "b@x.com", "ab_headline_variant": "Angle 1"})
    client.post("/api/waitlist", json={"name": "Carol", "email": "c@x.com"})
    client.post("/api/pageview", json={"page_url": "https://smartcap.example/"})

    stats = client.get("/api/stats").json()
    assert stats["totalLeads"] == 3
    assert stats["totalPageViews"] == 1
    assert stats["variants"] == {"Control": 1, "Angle 1": 1}
    assert [lead["name"] for lead in stats["recentLeads"]] == ["Carol", "Bob", "Alice"]
    assert stats["recentPageViews"][0]["page_url"] == "https://smartcap.example/"


def test_stats_degrades_failed_queries_only(client, store):
    client.post("/api/waitlist", json={"name": "Alice", "email": "a@x.com", "ab_headline_variant": "Control"})
    with store.engine.begin() as conn:
        conn.execute(text("DROP TABLE page_views"))

    resp = client.get("/api/stats")
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["totalLeads"] == 1
    assert stats["variants"] == {"Control": 1}
    assert stats["totalPageViews"] == 0
    assert stats["recentPageViews"] == []


def test_stats_caps_recent_rows(client, store):
    for i in range(60):
        store.insert_lead(f"user{i}", f"u{i}@x.com", None)
    stats = client.get("/api/stats").json()
    assert stats["totalLeads"] == 60
    assert len(stats["recentLeads"]) == 50
    assert stats["recentLeads"][0]["name"] == "user59"


def test_store_not_open_is_server_error(no_email):
    main.app.state.store = None
    c = TestClient(main.app)
    resp = c.get("/api/stats")
    assert resp.status_code == 500
    assert resp.json()["success"] is False


def test_static_pages(client):
    assert client.get("/").status_code == 200
    assert client.get("/dashboard").status_code == 200
    assert client.get("/health").json() == {"ok": True}


def test_pageview_malformed_multipart_still_inserts(client, store):
    resp = client.post(
        "/api/pageview",
        content=b"",
        headers={"Content-Type": "multipart/form-data", "X-Forwarded-For": "1.2.3.4"},
    )
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert store.count_page_views() == 1
    row = store.recent_page_views(1)[0]
    assert row["ip_address"] == "1.2.3.4"
    assert row["referrer"] is None
