# tests/test_api.py
"""HTTP layer: status codes for each error kind and the main request flows."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi.testclient import TestClient
from fleet_records.main import app

API = "/api/v1"


@pytest.fixture
def client(store, attachments):
    app.state.store = store
    app.state.attachments = attachments
    with TestClient(app) as test_client:
        yield test_client
    del app.state.store
    del app.state.attachments


def create_report(client, vehicle_number="T-101", **fields):
    body = {"vehicle_number": vehicle_number, "inspection_date": "2024-03-15", "inspector_name": "Dana Ortiz"}
    body.update(fields)
    resp = client.post(f"{API}/reports", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestVehiclesApi:
    def test_health(self, client):
        resp = client.get(f"{API}/health")
        assert resp.status_code == 200
        assert resp.json()["database"] == "ok"

    def test_create_and_conflict(self, client):
        resp = client.post(f"{API}/vehicles", json={"vehicle_number": "V-1", "make": "Mack"})
        assert resp.status_code == 201
        assert resp.json()["status"] == "active"
        assert client.post(f"{API}/vehicles", json={"vehicle_number": "V-1"}).status_code == 409

    def test_validation_error_has_details(self, client):
        resp = client.post(f"{API}/vehicles", json={"vehicle_number": "V-1", "year": -1})
        assert resp.status_code == 400
        assert resp.json()["details"][0].startswith("year")

    def test_not_found(self, client):
        assert client.get(f"{API}/vehicles/404").status_code == 404
        assert client.get(f"{API}/vehicles/number/NOPE").status_code == 404

    def test_empty_update(self, client):
        vehicle = client.post(f"{API}/vehicles", json={"vehicle_number": "V-1"}).json()
        resp = client.put(f"{API}/vehicles/{vehicle['id']}", json={"unknown": 1})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No fields to update"

    def test_list_paginates_in_natural_order(self, client):
        for number in ["T-10", "9", "T-5", "10"]:
            client.post(f"{API}/vehicles", json={"vehicle_number": number})
        resp = client.get(f"{API}/vehicles", params={"limit": 3})
        body = resp.json()
        assert [v["vehicle_number"] for v in body["items"]] == ["9", "10", "T-5"]
        assert body["pagination"] == {"page": 1, "limit": 3, "total": 4, "total_pages": 2}
        assert client.get(f"{API}/vehicles", params={"limit": 0}).status_code == 400

    def test_t101_flow(self, client):
        report = create_report(client, make="Ford")
        vehicle = client.get(f"{API}/vehicles/number/T-101").json()

        resp = client.put(f"{API}/vehicles/{vehicle['id']}", json={"status": "maintenance"})
        assert resp.json()["status"] == "maintenance"
        assert resp.json()["make"] == "Ford"

        assert client.delete(f"{API}/vehicles/{vehicle['id']}", params={"permanent": True}).status_code == 200
        reports = client.get(f"{API}/reports", params={"search": "T-101"}).json()
        assert reports["pagination"]["total"] == 0
        assert client.get(f"{API}/reports/{report['id']}").status_code == 404

    def test_upsert_creates_then_merges(self, client):
        resp = client.post(f"{API}/vehicles/upsert", json={"vehicle_number": "V-9", "make": "Ford"})
        assert resp.status_code == 200
        resp = client.post(f"{API}/vehicles/upsert", json={"vehicle_number": "V-9", "year": 2020, "make": None})
        assert (resp.json()["make"], resp.json()["year"]) == ("Ford", 2020)
        assert client.get(f"{API}/vehicles").json()["pagination"]["total"] == 1

    def test_upsert_requires_number(self, client):
        resp = client.post(f"{API}/vehicles/upsert", json={"make": "Ford"})
        assert resp.status_code == 400
        assert resp.json()["details"] == ["vehicle_number: Vehicle number is required"]

    def test_soft_delete(self, client):
        vehicle = client.post(f"{API}/vehicles", json={"vehicle_number": "V-1"}).json()
        resp = client.delete(f"{API}/vehicles/{vehicle['id']}")
        assert resp.json()["status"] == "retired"
        assert client.get(f"{API}/vehicles/{vehicle['id']}").json()["status"] == "retired"


class TestReportsApi:
    def test_report_status_and_statistics(self, client):
        report = create_report(client, defects="Cracked mirror")
        assert report["status"] == "ATTENTION"
        stats = client.get(f"{API}/reports/statistics").json()
        assert stats["total_reports"] == 1
        assert stats["total_vehicles"] == 1

    def test_future_date_rejected(self, client):
        resp = client.post(f"{API}/reports", json={"vehicle_number": "T-1", "inspection_date": "2999-01-01",
                                                   "inspector_name": "Dana"})
        assert resp.status_code == 400


class TestDocumentsApi:
    def upload(self, client, vehicle_id, content=b"%PDF-1.4 data", mime="application/pdf"):
        return client.post(
            f"{API}/vehicles/{vehicle_id}/documents",
            files={"file": ("invoice.pdf", content, mime)},
            data={"category": "invoice", "title": "Tire invoice", "vendor": "Acme"},
        )

    def test_upload_download_delete(self, client):
        vehicle = client.post(f"{API}/vehicles", json={"vehicle_number": "V-1"}).json()
        resp = self.upload(client, vehicle["id"])
        assert resp.status_code == 201, resp.text
        document = resp.json()
        assert document["vendor"] == "Acme"

        download = client.get(f"{API}/documents/{document['id']}/download")
        assert download.status_code == 200
        assert download.content == b"%PDF-1.4 data"

        stats = client.get(f"{API}/vehicles/{vehicle['id']}/documents/stats").json()
        assert stats == {"total_count": 1, "count_by_category": {"invoice": 1}, "total_size_bytes": 13}

        assert client.delete(f"{API}/documents/{document['id']}").status_code == 200
        assert client.get(f"{API}/documents/{document['id']}/download").status_code == 404

    def test_rejected_type(self, client):
        vehicle = client.post(f"{API}/vehicles", json={"vehicle_number": "V-1"}).json()
        resp = self.upload(client, vehicle["id"], content=b"MZ", mime="application/x-msdownload")
        assert resp.status_code == 400


class TestExportApi:
    def test_pdf_and_csv(self, client):
        report = create_report(client)
        pdf = client.get(f"{API}/export/reports/{report['id']}/pdf")
        assert pdf.status_code == 200
        assert pdf.headers["content-type"] == "application/pdf"
        assert pdf.content.startswith(b"%PDF")
        assert "attachment" in pdf.headers["content-disposition"]

        table = client.get(f"{API}/export/reports/csv", params={"ids": str(report["id"])})
        assert table.status_code == 200
        assert table.headers["content-type"].startswith("text/csv")
        assert len(table.text.strip().splitlines()) == 2

    def test_bad_ids(self, client):
        assert client.get(f"{API}/export/reports/csv", params={"ids": "1,x"}).status_code == 400
