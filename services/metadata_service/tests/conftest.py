import pytest
from fastapi.testclient import TestClient

from metadata_service.config import Settings, get_settings
from metadata_service.main import app

BOUNDARY = "----metadata-test-boundary"


def build_multipart(parts, boundary=BOUNDARY, closed=True) -> bytes:
    """Assemble a multipart/form-data body by hand.

    ``parts`` is a list of ``(headers, body)`` pairs, where ``headers`` is a
    list of raw header lines.
    """
    out = b""
    for headers, body in parts:
        out += f"--{boundary}\r\n".encode()
        for line in headers:
            out += (line.encode("utf-8") if isinstance(line, str) else line) + b"\r\n"
        out += b"\r\n" + body + b"\r\n"
    if closed:
        out += f"--{boundary}--\r\n".encode()
    return out


def multipart_headers(boundary=BOUNDARY) -> dict:
    return {"Content-Type": f"multipart/form-data; boundary={boundary}"}


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def small_limits():
    limited = Settings(max_file_size=1024)
    app.dependency_overrides[get_settings] = lambda: limited
    yield limited
    app.dependency_overrides.clear()
