import datetime as dt
import logging

from fastapi.testclient import TestClient

from metadata_service import main as main_module
from metadata_service.config import Settings, get_settings
from metadata_service.main import app


def test_health_reports_status_and_limits(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "OK"
    assert data["service"] == "File Metadata Microservice"
    assert data["upload_limits"] == {"max_file_size": "50MB", "max_files": 1, "field_name": "upfile"}
    ts = dt.datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))
    assert ts.tzinfo is not None


def test_health_follows_configured_limits(client, small_limits):
    data = client.get("/api/health").json()
    assert data["status"] == "OK"
    assert data["upload_limits"]["max_file_size"] == "1KB"


def test_info_describes_upload_endpoint(client):
    resp = client.get("/api/info")
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "File Metadata Microservice"
    upload = data["endpoints"]["upload"]
    assert upload["method"] == "POST"
    assert upload["url"] == "/api/fileanalyse"
    assert upload["field_name"] == "upfile"
    assert set(upload["response"]) == {"name", "type", "size"}
    assert data["endpoints"]["health"]["url"] == "/api/health"
    assert len(data["usage"]) == 4


def test_test_upload_form_is_html(client):
    resp = client.get("/api/test-upload-form")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert 'action="/api/fileanalyse"' in resp.text
    assert 'enctype="multipart/form-data"' in resp.text
    assert 'name="upfile"' in resp.text


def test_unknown_api_route_lists_endpoints(client):
    for path in ("/api/unknown", "/api/files/123/meta"):
        resp = client.get(path)
        assert resp.status_code == 404
        assert resp.json() == {
            "error": "API endpoint not found",
            "available": [
                "POST /api/fileanalyse",
                "GET /api/health",
                "GET /api/info",
                "GET /api/test-upload-form",
            ],
        }


def test_index_serves_front_page(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert 'name="upfile"' in resp.text


def test_index_placeholder_without_static_dir(client, tmp_path):
    app.dependency_overrides[get_settings] = lambda: Settings(static_dir=str(tmp_path))
    try:
        resp = client.get("/")
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 200
    assert "index.html not found" in resp.text


def test_cors_headers(client):
    resp = client.get("/api/health", headers={"Origin": "http://example.com"})
    assert resp.headers["access-control-allow-origin"] == "*"


def test_openapi_documents_multipart_upload(client):
    schema = client.get("/openapi.json").json()
    body = schema["paths"]["/api/fileanalyse"]["post"]["requestBody"]
    assert "upfile" in body["content"]["multipart/form-data"]["schema"]["properties"]


def test_post_to_unknown_api_route_is_method_not_allowed(client):
    # the catch-all only answers GET
    resp = client.post("/api/unknown")
    assert resp.status_code == 405


def test_unhandled_error_returns_generic_500(monkeypatch, caplog):
    def _broken(settings):
        raise RuntimeError("boom")

    monkeypatch.setattr(main_module, "api_info", _broken)
    with TestClient(app, raise_server_exceptions=False) as c, caplog.at_level(logging.ERROR):
        resp = c.get("/api/info")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
    assert "Unexpected error on GET /api/info" in caplog.text


def test_startup_banner_is_logged(caplog):
    with caplog.at_level(logging.INFO, logger="metadata_service.main"):
        with TestClient(app):
            pass
    assert "File Metadata Microservice started" in caplog.text
    assert "API endpoint: POST /api/fileanalyse" in caplog.text
    assert 'Upload field name: "upfile", maximum file size: 50MB' in caplog.text
    assert "never written to disk" in caplog.text
