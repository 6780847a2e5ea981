from tests.e2e.e2e_test_base import E2ETestBase


class TestCampaignState(E2ETestBase):
    def test_retrieve_unknown_state_is_empty_object(self):
        response = self.client.get("/api/campaign-state/unknown/retrieve")

        assert response.status_code == 200
        assert response.content == b"{}"
        assert response.headers["content-type"].startswith("application/json")

    def test_store_then_retrieve_is_byte_identical(self):
        body = b'{"step":3,  "posts":[{"id":"post_1","text":"caf\xc3\xa9"}],"done":false}'

        stored = self.client.post(
            "/api/campaign-state/camp-1/store",
            content=body,
            headers={"Content-Type": "application/json"},
        )
        retrieved = self.client.get("/api/campaign-state/camp-1/retrieve")

        assert stored.status_code == 200
        assert stored.json() == {"success": True}
        assert retrieved.content == body

    def test_overwrite_keeps_latest(self):
        self.client.post("/api/campaign-state/camp-2/store", content=b'{"v": 1}')
        self.client.post("/api/campaign-state/camp-2/store", content=b'{"v": 2}')

        response = self.client.get("/api/campaign-state/camp-2/retrieve")

        assert response.json() == {"v": 2}

    def test_states_are_isolated_by_id(self):
        self.client.post("/api/campaign-state/a/store", content=b'{"id": "a"}')

        response = self.client.get("/api/campaign-state/b/retrieve")

        assert response.json() == {}

    def test_invalid_json_is_rejected(self):
        response = self.client.post(
            "/api/campaign-state/camp-3/store", content=b"{not json"
        )

        assert response.status_code == 400
        assert "error" in response.json()
        assert self.client.get("/api/campaign-state/camp-3/retrieve").json() == {}
