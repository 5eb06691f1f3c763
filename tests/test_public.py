import logging

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text


ROOT_URL = "https://github.com/tendstofortytwo/tendsto"


class TestPublicRedirects:
    """Test the public redirect listener"""

    def test_root_redirects_to_root_url(self, public_client: TestClient):
        response = public_client.get("/", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == ROOT_URL

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "PATCH"])
    def test_root_redirect_ignores_method(self, public_client: TestClient, method):
        response = public_client.request(method, "/", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == ROOT_URL

    def test_unknown_shortcode_is_404(self, public_client: TestClient):
        response = public_client.get("/abc", follow_redirects=False)
        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "not found"

    def test_known_shortcode_redirects(self, public_client: TestClient, store):
        store.set("abc", "https://example.com")

        response = public_client.get("/abc", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com"

    @pytest.mark.parametrize("path", ["/abc/", "//abc", "//abc//"])
    def test_slashes_are_trimmed(self, public_client: TestClient, store, path):
        store.set("abc", "https://example.com")

        response = public_client.get(f"http://testserver{path}", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com"

    def test_post_to_shortcode_also_redirects(self, public_client: TestClient, store):
        store.set("abc", "https://example.com")

        response = public_client.post("/abc", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com"

    def test_docs_path_is_just_a_shortcode(self, public_client: TestClient, store):
        store.set("docs", "https://docs.example")

        response = public_client.get("/docs", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://docs.example"

    def test_redirect_does_not_mutate_store(self, public_client: TestClient, store):
        public_client.get("/abc", follow_redirects=False)
        public_client.post("/abc", follow_redirects=False)
        assert store.list() == []

    def test_storage_failure_is_500_and_logged(self, public_client: TestClient, store, caplog):
        with store.engine.begin() as conn:
            conn.execute(text("drop table urls"))

        with caplog.at_level(logging.ERROR, logger="linkhop.public"):
            response = public_client.get("/abc", follow_redirects=False)

        assert response.status_code == 500
        assert response.text == "oops"
        assert any("pubsrv: ERROR" in record.getMessage() for record in caplog.records)

    def test_requests_are_logged(self, public_client: TestClient, caplog):
        with caplog.at_level(logging.INFO, logger="linkhop.public"):
            public_client.get("/hello", follow_redirects=False)

        assert any(record.getMessage() == "pubsrv: GET /hello" for record in caplog.records)

    @pytest.mark.parametrize("method", ["PROPFIND", "MKCOL", "BREW"])
    def test_nonstandard_methods_redirect(self, public_client: TestClient, store, method):
        store.set("abc", "https://example.com")

        response = public_client.request(method, "/abc", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com"

    def test_nonstandard_method_on_missing_shortcode_is_404(self, public_client: TestClient):
        response = public_client.request("PROPFIND", "/missing", follow_redirects=False)
        assert response.status_code == 404
        assert response.text == "not found"
