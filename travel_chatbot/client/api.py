import logging
from typing import Any, Iterator

import requests

from travel_chatbot.client.sse import SSEFrameDecoder

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
# the first byte of a reply can take a while, deltas after that arrive quickly
STREAM_TIMEOUT = (10, 120)


class TravelChatClient:
    """Thin ``requests`` wrapper over the Travel Chatbot HTTP API."""

    def __init__(self, base_url: str, token: str | None = None, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            headers=self._headers(),
            timeout=kwargs.pop("timeout", DEFAULT_TIMEOUT),
            **kwargs,
        )
        response.raise_for_status()
        return response

    # --- auth ---

    def signup(self, email: str, password: str, first_name: str | None = None, last_name: str | None = None) -> dict[str, Any]:
        data = self._request(
            "POST",
            "/auth/signup",
            json={"email": email, "password": password, "first_name": first_name, "last_name": last_name},
        ).json()
        self.token = data["token"]
        return data["user"]

    def login(self, email: str, password: str) -> dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password}).json()
        self.token = data["token"]
        return data["user"]

    def me(self) -> dict[str, Any]:
        return self._request("GET", "/auth/me").json()["user"]

    # --- conversations ---

    def list_conversations(self) -> list[dict[str, Any]]:
        return self._request("GET", "/conversations").json()

    def get_conversation(self, conversation_id: int) -> dict[str, Any]:
        return self._request("GET", f"/conversations/{conversation_id}").json()

    def create_conversation(self, title: str | None = None) -> dict[str, Any]:
        return self._request("POST", "/conversations", json={"title": title}).json()

    def delete_conversation(self, conversation_id: int) -> None:
        self._request("DELETE", f"/conversations/{conversation_id}")

    def stream_message(self, conversation_id: int, content: str) -> Iterator[dict[str, Any]]:
        """
        POST a turn and yield decoded SSE payloads as they arrive.

        Raises ``requests.HTTPError`` before yielding anything if the server
        rejects the turn (401, 404, ...).
        """
        decoder = SSEFrameDecoder()
        with self.session.post(
            f"{self.base_url}/conversations/{conversation_id}/messages",
            headers=self._headers(),
            json={"content": content},
            stream=True,
            timeout=STREAM_TIMEOUT,
        ) as response:
            response.raise_for_status()
            for chunk in response.iter_content(chunk_size=None):
                yield from decoder.feed(chunk)
            if decoder.pending:
                logger.warning(f"Stream closed with {len(decoder.pending)} undecoded characters")

    # --- travel catalog ---

    def list_cities(self) -> list[dict[str, Any]]:
        return self._request("GET", "/cities").json()

    def get_city(self, slug: str) -> dict[str, Any]:
        return self._request("GET", f"/cities/{slug}").json()

    def list_hotels(self, city_id: int, budget_level: str | None = None) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"cityId": city_id}
        if budget_level:
            params["budgetLevel"] = budget_level
        return self._request("GET", "/hotels", params=params).json()
