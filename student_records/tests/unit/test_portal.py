import json
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from student_records.src.portal.client import RecordsApiClient
from student_records.src.portal.main import create_app
from student_records.src.services.config import AppConfig

TOKEN = "tok-123"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeApi:
    """Route table standing in for the records API."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []
        self.on("POST", "/auth/login", lambda r: httpx.Response(200, json={"token": TOKEN}))
        self.on("GET", "/home/index", lambda r: httpx.Response(200, json=[]))

    def on(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": "not_found", "message": "no route"})
        return handler(request)

    def last(self, method: str, path: str) -> httpx.Request:
        return [r for r in self.requests if r.method == method and r.url.path == path][-1]


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def client(api: FakeApi, tmp_path: Path) -> TestClient:
    config = AppConfig(
        storage_base_path=tmp_path,
        session_secret_key="portal-test-session-secret",
    )
    api_client = RecordsApiClient("http://api.test", transport=httpx.MockTransport(api))
    return TestClient(create_app(config, api_client=api_client))


def _refuse_connection(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def _login(client: TestClient) -> httpx.Response:
    return client.post(
        "/auth/login",
        data={"username": "admin", "password": "password"},
        follow_redirects=False,
    )


def test_login_page_renders(client: TestClient) -> None:
    response = client.get("/auth/login")

    assert response.status_code == 200
    assert "Login" in response.text


def test_login_stores_token_and_relays_it(client: TestClient, api: FakeApi) -> None:
    api.on(
        "GET",
        "/home/index",
        lambda r: httpx.Response(200, json=[{"studentID": 1, "name": "Alice", "filePath": None}]),
    )

    login = _login(client)
    page = client.get("/home/index")

    assert login.status_code == 303
    assert login.headers["location"] == "/home/index"
    assert page.status_code == 200
    assert "Alice" in page.text
    assert "Signed in: admin" in page.text
    assert api.last("GET", "/home/index").headers["Authorization"] == f"Bearer {TOKEN}"
    assert json.loads(api.last("POST", "/auth/login").content) == {
        "username": "admin",
        "password": "password",
    }


@pytest.mark.parametrize(
    "handler",
    [
        lambda r: httpx.Response(401, json={"error": "invalid_credentials", "message": "no"}),
        lambda r: httpx.Response(200, json={}),
        _refuse_connection,
    ],
    ids=["rejected", "missing-token", "network"],
)
def test_login_failures_show_generic_message(client: TestClient, api: FakeApi, handler) -> None:
    api.on("POST", "/auth/login", handler)

    response = _login(client)

    assert response.status_code == 200
    assert "Invalid username or password" in response.text
    assert client.get("/home/index", follow_redirects=False).status_code == 303


def test_protected_route_redirects_and_disables_cache(client: TestClient) -> None:
    response = client.get("/home/index", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/auth/login"
    assert response.headers["cache-control"] == "no-cache, no-store, must-revalidate"
    assert response.headers["pragma"] == "no-cache"
    assert response.headers["expires"] == "0"


def test_authenticated_pages_skip_no_cache_headers(client: TestClient) -> None:
    _login(client)

    response = client.get("/home/index")

    assert "no-store" not in response.headers.get("cache-control", "")


def test_logout_clears_session(client: TestClient) -> None:
    _login(client)

    logout = client.get("/auth/logout", follow_redirects=False)
    after = client.get("/home/index", follow_redirects=False)

    assert logout.status_code == 303
    assert logout.headers["location"] == "/auth/login"
    assert "no-store" in logout.headers["cache-control"]
    assert after.status_code == 303


def test_index_renders_fallback_when_api_fails(client: TestClient, api: FakeApi) -> None:
    _login(client)
    api.on("GET", "/home/index", lambda r: httpx.Response(500, json={"error": "internal_error"}))

    response = client.get("/home/index")

    assert response.status_code == 200
    assert "Unable to load student records" in response.text


def test_api_rejecting_token_ends_session(client: TestClient, api: FakeApi) -> None:
    _login(client)
    api.on("GET", "/home/index", lambda r: httpx.Response(401, json={"error": "token_expired"}))

    response = client.get("/home/index", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/auth/login"
    assert client.get("/home/addstudent", follow_redirects=False).status_code == 303


def test_add_form_is_blank_for_new_student(client: TestClient) -> None:
    _login(client)

    response = client.get("/home/addstudent", params={"studentID": 0})

    assert response.status_code == 200
    assert "Add Student" in response.text


def test_edit_form_is_prefilled(client: TestClient, api: FakeApi) -> None:
    _login(client)
    api.on(
        "GET",
        "/home/getstudentbyid",
        lambda r: httpx.Response(
            200,
            json={"studentID": 4, "name": "Dora", "filePath": "http://api.test/home/get/d.jpeg"},
        ),
    )

    response = client.get("/home/addstudent", params={"studentID": 4})

    assert response.status_code == 200
    assert "Edit Student" in response.text
    assert 'value="Dora"' in response.text
    assert "/home/image/d.jpeg" in response.text
    assert api.last("GET", "/home/getstudentbyid").url.params["studentID"] == "4"


def test_save_relays_multipart_with_file(client: TestClient, api: FakeApi) -> None:
    _login(client)
    api.on(
        "POST",
        "/home/save",
        lambda r: httpx.Response(200, json={"studentID": 1, "name": "Alice", "filePath": None}),
    )

    response = client.post(
        "/home/save",
        data={"StudentID": "1", "Name": "Alice", "FilePath": "", "IsEdit": "false"},
        files={"File": ("a.jpg", b"jpeg-bytes", "image/jpeg")},
    )

    relayed = api.last("POST", "/home/save")
    assert relayed.headers["Authorization"] == f"Bearer {TOKEN}"
    assert relayed.headers["content-type"].startswith("multipart/form-data")
    assert b'name="StudentID"' in relayed.content
    assert b'name="Name"' in relayed.content
    assert b'filename="a.jpg"' in relayed.content
    assert b"jpeg-bytes" in relayed.content
    assert "Record Saved Successfully" in response.text


def test_save_edit_reports_update(client: TestClient, api: FakeApi) -> None:
    _login(client)
    api.on(
        "POST",
        "/home/save",
        lambda r: httpx.Response(200, json={"studentID": 1, "name": "Alicia", "filePath": None}),
    )

    response = client.post(
        "/home/save",
        data={"StudentID": "1", "Name": "Alicia", "IsEdit": "true"},
    )

    assert "Record Updated Successfully" in response.text


def test_save_failure_flashes_error(client: TestClient, api: FakeApi) -> None:
    _login(client)
    api.on(
        "POST",
        "/home/save",
        lambda r: httpx.Response(404, json={"error": "image_delete_failed", "message": "File not found"}),
    )

    response = client.post("/home/save", data={"StudentID": "1", "Name": "Alice"})

    assert "Error Occured" in response.text
    assert "File not found" not in response.text


def test_delete_flashes_result(client: TestClient, api: FakeApi) -> None:
    _login(client)
    api.on(
        "DELETE",
        "/home/deletebyid",
        lambda r: httpx.Response(200, json={"studentID": 1, "name": "Alice", "filePath": None}),
    )

    ok = client.post("/home/delete", data={"studentID": "1"})
    api.on("DELETE", "/home/deletebyid", lambda r: httpx.Response(400, json={"error": "not_found"}))
    failed = client.post("/home/delete", data={"studentID": "2"})

    assert "Record Deleted Successfully" in ok.text
    assert "Error Occured" in failed.text


def test_image_relay_attaches_token(client: TestClient, api: FakeApi) -> None:
    _login(client)
    api.on(
        "GET",
        "/home/get/pic.jpeg",
        lambda r: httpx.Response(200, content=b"img", headers={"content-type": "image/jpeg"}),
    )

    response = client.get("/home/image/pic.jpeg")

    assert response.status_code == 200
    assert response.content == b"img"
    assert api.last("GET", "/home/get/pic.jpeg").headers["Authorization"] == f"Bearer {TOKEN}"


def test_image_relay_missing_is_404(client: TestClient) -> None:
    _login(client)

    assert client.get("/home/image/none.jpeg").status_code == 404


def test_empty_student_id_shows_blank_form(client: TestClient, api: FakeApi) -> None:
    _login(client)

    response = client.get("/home/addstudent?studentID=")

    assert response.status_code == 200
    assert "Add Student" in response.text
    assert not [r for r in api.requests if r.url.path == "/home/getstudentbyid"]


def test_non_numeric_student_id_flashes_error(client: TestClient) -> None:
    _login(client)

    response = client.get("/home/addstudent", params={"studentID": "abc"}, follow_redirects=False)
    page = client.get("/home/index")

    assert response.status_code == 303
    assert response.headers["location"] == "/home/index"
    assert "Error Occured" in page.text


def test_delete_without_id_flashes_error(client: TestClient, api: FakeApi) -> None:
    _login(client)

    response = client.post("/home/delete", data={}, follow_redirects=False)
    page = client.get("/home/index")

    assert response.status_code == 303
    assert response.headers["location"] == "/home/index"
    assert "Error Occured" in page.text
    assert not [r for r in api.requests if r.url.path == "/home/deletebyid"]


def test_malformed_request_without_session_goes_to_login(client: TestClient) -> None:
    response = client.post("/home/delete", data={}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/auth/login"


def test_image_relay_reports_unreachable_api(client: TestClient, api: FakeApi) -> None:
    _login(client)
    api.on("GET", "/home/get/pic.jpeg", _refuse_connection)

    assert client.get("/home/image/pic.jpeg").status_code == 503
