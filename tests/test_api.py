"""
Routing, envelopes and error mapping through the FastAPI app, with the
database replaced by `FakeDatabase`.
"""

import io
from datetime import datetime, timezone

import asyncpg
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from core.dependencies import get_db
from main import app


def make_png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def client(fake_db):
    app.dependency_overrides[get_db] = lambda: fake_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_unknown_route(client):
    response = client.get("/api/v1/nowhere")
    assert response.status_code == 404
    assert response.json() == {"detail": "Can't find this route /api/v1/nowhere"}


def test_list_envelope(client, fake_db, media_base):
    fake_db.conn.fetchval.return_value = 3
    fake_db.conn.fetch.return_value = [{"id": 4, "auction_name": "Lot", "logo_one": "l.png"}]

    response = client.get("/api/v1/auctions", params={"limit": "2", "sort": "-created_at"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["results"] == 1
    assert body["pagination"] == {
        "page": 1,
        "limit": 2,
        "skip": 0,
        "total_count": 3,
        "total_pages": 2,
        "next_page": 2,
    }
    assert body["data"][0]["logo_one"] == f"{media_base}/auctions/l.png"


def test_nested_list_is_scoped_to_project(client, fake_db):
    fake_db.conn.fetchval.return_value = 0

    response = client.get("/api/v1/projects/5/auctions")

    assert response.status_code == 200
    count_sql, project_id = fake_db.conn.fetchval.await_args.args
    assert '"project_id" = $1' in count_sql
    assert project_id == 5


@pytest.mark.parametrize(
    "query,detail",
    [
        ("open_price[ne]=3", "Unsupported filter operator 'ne' in 'open_price[ne]'."),
        ("colour=red", "Unknown field 'colour'."),
        ("fields=auction_name,-notes1", "Cannot mix included and excluded fields."),
    ],
)
def test_bad_query_is_400(client, fake_db, query, detail):
    response = client.get(f"/api/v1/auctions?{query}")
    assert response.status_code == 400
    assert response.json() == {"detail": detail}
    fake_db.conn.fetchval.assert_not_awaited()


def test_get_missing_auction(client, fake_db):
    fake_db.fetch_one.return_value = None
    response = client.get("/api/v1/auctions/7")
    assert response.status_code == 404
    assert response.json() == {"detail": "No auction with id: 7"}


def test_running_route_is_not_an_id(client, fake_db):
    fake_db.fetch_one.return_value = None
    response = client.get("/api/v1/auctions/running")
    assert response.status_code == 404
    assert response.json() == {"detail": "No auction is running."}


def test_toggle_running_message(client, fake_db):
    fake_db.conn.fetchrow.side_effect = [
        {"id": 1, "flag": False},
        {"id": 1, "is_running": True},
    ]

    response = client.patch("/api/v1/auctions/1/toggle-running")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"id": 1, "is_running": True},
        "message": "Auction started successfully",
    }


def test_toggle_running_missing(client, fake_db):
    fake_db.conn.fetchrow.return_value = None
    response = client.patch("/api/v1/auctions/3/toggle-running")
    assert response.status_code == 404
    assert response.json() == {"detail": "No auction with id: 3"}


def test_toggle_running_failure_is_generic(client, fake_db):
    fake_db.conn.execute.side_effect = asyncpg.exceptions.DeadlockDetectedError("deadlock on auctions")

    response = client.patch("/api/v1/auctions/1/toggle-running")

    assert response.status_code == 500
    assert response.json() == {"detail": "Error toggling auction state"}


def test_toggle_display_rejects_other_fields(client, fake_db):
    response = client.patch("/api/v1/auctions/1/toggle-display/title")
    assert response.status_code == 400
    assert response.json() == {"detail": 'Can only toggle fields that start with "display_".'}
    fake_db.fetch_one.assert_not_awaited()


def test_toggle_display_missing_auction(client, fake_db):
    fake_db.fetch_one.return_value = None
    response = client.patch("/api/v1/auctions/9/toggle-display/display_logo_one")
    assert response.status_code == 404
    assert response.json() == {"detail": "No auction found with id: 9"}


def test_nested_create_takes_project_from_path(client, fake_db):
    fake_db.fetch_one.return_value = {"id": 1, "auction_name": "Lot 1", "project_id": 5}

    response = client.post("/api/v1/projects/5/auctions", json={"auction_name": "Lot 1", "project_id": 8})

    assert response.status_code == 201
    assert response.json()["data"]["project_id"] == 5
    assert fake_db.fetch_one.await_args.args[1:] == ("Lot 1", 5)


def test_create_auction_needs_project(client, fake_db):
    response = client.post("/api/v1/auctions", json={"auction_name": "Lot 1"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Associated project is required."}


def test_create_auction_rejects_is_running(client, fake_db):
    fake_db.fetch_one.return_value = {"id": 1, "auction_name": "Lot 1", "project_id": 5}

    client.post("/api/v1/projects/5/auctions", json={"auction_name": "Lot 1", "is_running": True})

    sql = fake_db.fetch_one.await_args.args[0]
    assert "is_running" not in sql.split("RETURNING")[0]


def test_create_project_validates_time(client):
    response = client.post(
        "/api/v1/projects",
        json={
            "title": "Harbour plots",
            "description": "Waterfront lots",
            "date_start": "2030-01-01",
            "auction_start_time": "25:00",
        },
    )
    assert response.status_code == 422


def test_create_project_from_form(client, fake_db):
    fake_db.fetch_one.side_effect = lambda sql, *args: {"id": 1, "status": args[-1], "image_cover": None}

    response = client.post(
        "/api/v1/projects",
        data={
            "title": "Harbour plots",
            "description": "Waterfront lots",
            "date_start": "2000-01-01T00:00:00Z",
            "auction_start_time": "10:00",
        },
    )

    assert response.status_code == 201
    assert response.json()["data"]["status"] == "ongoing"


def test_price_with_unknown_auction(client, fake_db):
    fake_db.fetch_one.side_effect = asyncpg.ForeignKeyViolationError("prices_auction_id_fkey")
    response = client.post("/api/v1/prices", json={"auction_id": 99, "sold_price": "1200.50"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Associated auction does not exist."}


def test_update_contact_rejects_bad_json(client):
    response = client.put(
        "/api/v1/contacts/1",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 422


def test_delete_contact(client, fake_db):
    fake_db.fetch_one.return_value = {"id": 3}
    response = client.delete("/api/v1/contacts/3")
    assert response.status_code == 204
    assert response.content == b""


def test_delete_missing_banner(client, fake_db):
    fake_db.fetch_one.return_value = None
    response = client.delete("/api/v1/banners/3")
    assert response.status_code == 404
    assert response.json() == {"detail": "No banner found for id 3"}


@pytest.mark.parametrize("auction_id", ["0", "99999999999999999999"])
def test_auction_id_outside_bigint_range(client, fake_db, auction_id):
    response = client.get(f"/api/v1/auctions/{auction_id}")
    assert response.status_code == 422
    fake_db.fetch_one.assert_not_awaited()


def test_list_filter_beyond_bigint_is_400(client, fake_db):
    response = client.get("/api/v1/auctions", params={"id": "99999999999999999999"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid value '99999999999999999999' for field 'id'."}
    fake_db.conn.fetchval.assert_not_awaited()


def test_price_body_rejects_oversized_auction_id(client, fake_db):
    response = client.post("/api/v1/prices", json={"auction_id": 2**63, "sold_price": "10"})
    assert response.status_code == 422
    fake_db.fetch_one.assert_not_awaited()


def test_status_ongoing_stamps_start(client, fake_db):
    written = {}

    def update(sql, project_id, status, date_start, start_time):
        written.update(sql=sql, status=status, date_start=date_start, start_time=start_time)
        return {"id": project_id, "status": status, "auction_start_time": start_time}

    fake_db.fetch_one.side_effect = update
    before = datetime.now(timezone.utc)

    response = client.patch("/api/v1/projects/1/status", json={"status": "ongoing"})

    assert response.status_code == 200
    assert response.json()["data"] == {"id": 1, "status": "ongoing", "auction_start_time": written["start_time"]}
    assert written["status"] == "ongoing"
    assert before <= written["date_start"] <= datetime.now(timezone.utc)
    assert written["start_time"] == written["date_start"].strftime("%H:%M")
    assert '"status" = $2' in written["sql"]


def test_status_completed_keeps_dates(client, fake_db):
    fake_db.fetch_one.return_value = {"id": 1, "status": "completed"}

    response = client.patch("/api/v1/projects/1/status", json={"status": "completed"})

    assert response.status_code == 200
    assert fake_db.fetch_one.await_args.args[1:] == (1, "completed")


def test_status_rejects_unknown_value(client, fake_db):
    response = client.patch("/api/v1/projects/1/status", json={"status": "archived"})
    assert response.status_code == 422
    fake_db.fetch_one.assert_not_awaited()


def test_toggle_publish(client, fake_db, media_base):
    fake_db.fetch_one.return_value = {"id": 2, "is_published": False, "image_cover": "cover.jpg", "images": ["a.jpg"]}

    response = client.patch("/api/v1/projects/2/toggle-publish")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {
            "id": 2,
            "is_published": False,
            "image_cover": f"{media_base}/projects/cover.jpg",
            "images": [f"{media_base}/projects/a.jpg"],
        },
    }
    sql, project_id = fake_db.fetch_one.await_args.args
    assert '"is_published" = NOT "is_published"' in sql
    assert project_id == 2


def test_toggle_publish_missing_project(client, fake_db):
    fake_db.fetch_one.return_value = None
    response = client.patch("/api/v1/projects/4/toggle-publish")
    assert response.status_code == 404
    assert response.json() == {"detail": "No project found for id 4"}


def test_running_auction(client, fake_db, media_base):
    fake_db.fetch_one.return_value = {"id": 6, "auction_name": "Lot 6", "is_running": True, "bg_image": "bg.gif"}

    response = client.get("/api/v1/auctions/running")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {
            "id": 6,
            "auction_name": "Lot 6",
            "is_running": True,
            "bg_image": f"{media_base}/auctions/bg.gif",
        },
    }
    assert "is_running = true" in fake_db.fetch_one.await_args.args[0]


def test_price_embeds_its_auction(client, fake_db, media_base):
    fake_db.fetch_one.side_effect = [
        {"id": 1, "auction_id": 4, "sold_price": "1200.50"},
        {"id": 4, "auction_name": "Lot 4", "logo_one": "logo.png", "images": ["1.jpg"]},
    ]

    response = client.get("/api/v1/prices/1")

    assert response.status_code == 200
    assert response.json()["data"] == {
        "id": 1,
        "auction_id": 4,
        "sold_price": "1200.50",
        "auction": {
            "id": 4,
            "auction_name": "Lot 4",
            "logo_one": f"{media_base}/auctions/logo.png",
            "images": [f"{media_base}/auctions/1.jpg"],
        },
    }
    assert fake_db.fetch_one.await_args_list[1].args[1] == 4


def test_missing_price(client, fake_db):
    fake_db.fetch_one.return_value = None
    response = client.get("/api/v1/prices/8")
    assert response.status_code == 404
    assert response.json() == {"detail": "No price with id: 8"}


def test_failed_create_leaves_no_files(client, fake_db, uploads_dir):
    fake_db.fetch_one.side_effect = asyncpg.ForeignKeyViolationError("auctions_project_id_fkey")

    response = client.post(
        "/api/v1/auctions",
        data={"auction_name": "Lot 1", "project_id": "99"},
        files={"logo_one": ("logo.png", make_png(), "image/png")},
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Associated project does not exist."}
    stored = uploads_dir / "auctions"
    assert not stored.exists() or list(stored.iterdir()) == []


def test_update_replaces_old_file(client, fake_db, uploads_dir):
    folder = uploads_dir / "banners"
    folder.mkdir()
    (folder / "old.png").write_bytes(b"old")
    fake_db.fetch_one.side_effect = lambda sql, banner_id, *args: (
        {"id": banner_id, "image_cover": args[0] if args else "old.png"}
    )

    response = client.put("/api/v1/banners/3", files={"image_cover": ("new.png", make_png(), "image/png")})

    assert response.status_code == 200
    new_name = fake_db.fetch_one.await_args.args[2]
    assert [path.name for path in folder.iterdir()] == [new_name]
