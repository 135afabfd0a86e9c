# Shared fixtures: a scriptable fake provider client and the objects built on it.
import os

# keep the app on the offline client whatever the environment says
os.environ["PROVIDER"] = "echo"

import pytest
from fastapi.testclient import TestClient

from smartguard.gateway import AIGateway, InlineImage, ModelReply
from smartguard.session import SessionController, SessionStore

PHOTO = "data:image/jpeg;base64,U0VMRklF"
AVATAR = InlineImage(mime_type="image/png", data="QVZBVEFS")


class FakeClient:
    """Records every call and replays whatever the test configured."""

    def __init__(self):
        self.model = "fake"
        self.edit_calls = []
        self.search_calls = []
        self.generate_calls = []

        self.edited = AVATAR
        self.edit_error = None
        self.grounding = []
        self.search_error = None
        self.text = "Stay calm and keep the area clear."
        self.generate_error = None

    def edit_image(self, instruction, image):
        self.edit_calls.append((instruction, image))
        if self.edit_error:
            raise self.edit_error
        return ModelReply(images=[self.edited] if self.edited else [])

    def ground_search(self, instruction, location):
        self.search_calls.append((instruction, location))
        if self.search_error:
            raise self.search_error
        return ModelReply(text="places", grounding=list(self.grounding))

    def generate(self, instruction, image=None):
        self.generate_calls.append((instruction, image))
        if self.generate_error:
            raise self.generate_error
        return ModelReply(text=self.text)


def maps_chunk(title, uri, address=None):
    maps = {"title": title, "uri": uri}
    if address is not None:
        maps["address"] = address
    return {"maps": maps}


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def gateway(fake_client):
    return AIGateway(model_client=fake_client, timeout=5)


@pytest.fixture
def controller(gateway):
    return SessionController(gateway)


@pytest.fixture
def api(gateway):
    from smartguard.app import app, get_store

    sessions = SessionStore(gateway)
    app.dependency_overrides[get_store] = lambda: sessions
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
