# ===============================================
# tests/test_controller.py
# Persona selection, caching, stale completions and consultation guard
# ===============================================
import asyncio

import pytest

from conftest import AVATAR, PHOTO, maps_chunk
from smartguard.gateway import AIGateway, GenerationFailure, PlaceResult
from smartguard.personas import PersonaKind
from smartguard.personas.prompts import CONNECTION_FALLBACK
from smartguard.session import SessionController, SessionError

DOCTOR = PersonaKind.DOCTOR
LAWYER = PersonaKind.LAWYER
HANDYMAN = PersonaKind.HANDYMAN
NONE = PersonaKind.NONE


class GatedGateway(AIGateway):
    """Gateway whose calls block until the test opens the matching gate."""

    def __init__(self, client):
        super().__init__(model_client=client, timeout=5)
        self.gates = {}
        self.calls = []

    def gate(self, key):
        return self.gates.setdefault(key, asyncio.Event())

    async def transform_to_avatar(self, photo, persona):
        self.calls.append(("avatar", persona))
        await self.gate(("avatar", persona)).wait()
        return f"data:image/png;base64,{persona.value}"

    async def find_nearby_places(self, lat, lng, category_query):
        self.calls.append(("places", category_query))
        await self.gate(("places", category_query)).wait()
        return [PlaceResult(title=category_query, uri=f"https://maps.google.com/?q={len(category_query)}")]

    async def get_consultation(self, persona, text, image=None):
        self.calls.append(("consult", persona))
        await self.gate(("consult", persona)).wait()
        return f"advice for {persona.value}"


# -------------------------
# Avatar cache
# -------------------------
def test_select_generates_once_per_persona(controller, fake_client):
    controller.capture_photo(PHOTO)
    asyncio.run(controller.select(DOCTOR))
    asyncio.run(controller.select(DOCTOR))
    assert len(fake_client.edit_calls) == 1

    asyncio.run(controller.select(NONE))
    asyncio.run(controller.select(DOCTOR))
    assert len(fake_client.edit_calls) == 1
    assert controller.state.display_image == AVATAR.to_data_uri()


def test_doctor_without_location(controller, fake_client):
    controller.capture_photo(PHOTO)
    asyncio.run(controller.select(DOCTOR))

    st = controller.state
    assert st.avatars == {NONE: PHOTO, DOCTOR: AVATAR.to_data_uri()}
    assert st.places == []
    assert fake_client.search_calls == []
    assert not st.generating_avatar
    assert not st.loading_places


def test_failed_transform_caches_source_photo(controller, fake_client):
    fake_client.edit_error = GenerationFailure("no image")
    controller.capture_photo(PHOTO)
    asyncio.run(controller.select(LAWYER))
    assert controller.state.avatars[LAWYER] == PHOTO
    assert not controller.state.generating_avatar


def test_no_photo_skips_generation(controller, fake_client):
    asyncio.run(controller.select(DOCTOR))
    assert fake_client.edit_calls == []
    assert controller.state.display_image is None


def test_photo_is_captured_once(controller):
    controller.capture_photo(PHOTO)
    with pytest.raises(SessionError):
        controller.capture_photo("data:image/jpeg;base64,T1RIRVI=")
    assert controller.state.source_photo == PHOTO


# -------------------------
# Places
# -------------------------
def test_handyman_with_location_lists_places(controller, fake_client):
    fake_client.grounding = [
        maps_chunk("Tool Depot", "https://maps.google.com/?cid=1", "4 Market Rd"),
        maps_chunk("Hardware Hub", "https://maps.google.com/?cid=2"),
    ]
    controller.update_location(6.5, 3.4)
    asyncio.run(controller.select(HANDYMAN))

    st = controller.state
    assert [p.title for p in st.places] == ["Tool Depot", "Hardware Hub"]
    assert not st.loading_places
    instruction, _ = fake_client.search_calls[0]
    assert "Hardware Stores and Tool Supply" in instruction


def test_no_location_leaves_places_untouched(controller, fake_client):
    previous = [PlaceResult(title="Old", uri="https://maps.google.com/?cid=9")]
    controller.state.places = list(previous)
    asyncio.run(controller.select(DOCTOR))
    assert fake_client.search_calls == []
    assert controller.state.places == previous


def test_select_dashboard_clears_places(controller, fake_client):
    fake_client.grounding = [maps_chunk("Fire Station 3", "https://maps.google.com/?cid=3")]
    controller.capture_photo(PHOTO)
    controller.update_location(1.0, 2.0)
    asyncio.run(controller.select(PersonaKind.FIREFIGHTER))
    assert controller.state.places

    edits, searches = len(fake_client.edit_calls), len(fake_client.search_calls)
    asyncio.run(controller.select(NONE))
    assert controller.state.places == []
    assert len(fake_client.edit_calls) == edits
    assert len(fake_client.search_calls) == searches


def test_first_location_fix_wins(controller):
    assert controller.update_location(1.0, 2.0)
    assert not controller.update_location(3.0, 4.0)
    assert controller.state.location.as_tuple() == (1.0, 2.0)


def test_places_refetched_on_every_switch(controller, fake_client):
    controller.update_location(1.0, 2.0)
    asyncio.run(controller.select(DOCTOR))
    asyncio.run(controller.select(LAWYER))
    asyncio.run(controller.select(DOCTOR))
    assert len(fake_client.search_calls) == 3


# -------------------------
# Stale completions
# -------------------------
def test_stale_avatar_does_not_leak_into_new_persona(fake_client):
    async def scenario():
        gw = GatedGateway(fake_client)
        ctl = SessionController(gw)
        ctl.capture_photo(PHOTO)

        task_a = asyncio.create_task(ctl.select(DOCTOR))
        await asyncio.sleep(0)
        assert ctl.state.generating_avatar

        task_b = asyncio.create_task(ctl.select(LAWYER))
        await asyncio.sleep(0)
        assert ctl.state.active_persona is LAWYER

        gw.gate(("avatar", DOCTOR)).set()
        await task_a
        assert ctl.state.avatars[DOCTOR] == "data:image/png;base64,DOCTOR"
        assert LAWYER not in ctl.state.avatars
        assert ctl.state.generating_avatar
        assert ctl.state.display_image == PHOTO

        gw.gate(("avatar", LAWYER)).set()
        await task_b
        assert not ctl.state.generating_avatar
        assert ctl.state.display_image == "data:image/png;base64,LAWYER"

        # returning to DOCTOR reuses the entry produced while it was inactive
        await ctl.select(DOCTOR)
        assert gw.calls.count(("avatar", DOCTOR)) == 1

    asyncio.run(scenario())


def test_pending_generation_is_not_duplicated(fake_client):
    async def scenario():
        gw = GatedGateway(fake_client)
        ctl = SessionController(gw)
        ctl.capture_photo(PHOTO)

        first = asyncio.create_task(ctl.select(DOCTOR))
        await asyncio.sleep(0)
        await ctl.select(NONE)
        second = asyncio.create_task(ctl.select(DOCTOR))
        await asyncio.sleep(0)
        assert ctl.state.generating_avatar

        gw.gate(("avatar", DOCTOR)).set()
        await asyncio.gather(first, second)
        assert gw.calls.count(("avatar", DOCTOR)) == 1

    asyncio.run(scenario())


def test_stale_places_are_discarded(fake_client):
    async def scenario():
        gw = GatedGateway(fake_client)
        ctl = SessionController(gw)
        ctl.update_location(1.0, 2.0)

        task_a = asyncio.create_task(ctl.select(DOCTOR))
        await asyncio.sleep(0)
        task_b = asyncio.create_task(ctl.select(LAWYER))
        await asyncio.sleep(0)

        gw.gate(("places", "Hospitals and Clinics")).set()
        await task_a
        assert ctl.state.places == []
        assert ctl.state.loading_places

        gw.gate(("places", "Law Firms and Legal Aid")).set()
        await task_b
        assert [p.title for p in ctl.state.places] == ["Law Firms and Legal Aid"]
        assert not ctl.state.loading_places

    asyncio.run(scenario())


# -------------------------
# Consultation
# -------------------------
def test_empty_consultation_is_noop(controller, fake_client):
    asyncio.run(controller.select(DOCTOR))
    before = (controller.state.consultation.input_text, controller.state.consultation.result_text)
    assert asyncio.run(controller.submit_consultation("   ")) is False
    assert fake_client.generate_calls == []
    assert (controller.state.consultation.input_text, controller.state.consultation.result_text) == before


def test_consultation_stores_result(controller, fake_client):
    asyncio.run(controller.select(DOCTOR))
    assert asyncio.run(controller.submit_consultation("burnt my hand")) is True
    assert controller.state.consultation.result_text == "Stay calm and keep the area clear."
    assert controller.state.consultation.input_text == "burnt my hand"
    assert not controller.state.consulting


def test_consultation_network_error_yields_fallback(controller, fake_client):
    fake_client.generate_error = ConnectionError("network down")
    asyncio.run(controller.submit_consultation("help"))
    assert controller.state.consultation.result_text == CONNECTION_FALLBACK
    assert not controller.state.consulting


def test_attached_image_is_submitted(controller, fake_client):
    controller.attach_consultation_image("data:image/png;base64,VElSRQ==")
    assert asyncio.run(controller.submit_consultation("")) is True
    _, image = fake_client.generate_calls[0]
    assert image.data == "VElSRQ=="

    controller.clear_consultation_image()
    assert controller.state.consultation.image is None


def test_second_submission_while_consulting_is_rejected(fake_client):
    async def scenario():
        gw = GatedGateway(fake_client)
        ctl = SessionController(gw)
        first = asyncio.create_task(ctl.submit_consultation("engine smoke"))
        await asyncio.sleep(0)
        assert ctl.state.consulting

        assert await ctl.submit_consultation("still smoking") is False
        assert gw.calls.count(("consult", NONE)) == 1

        gw.gate(("consult", NONE)).set()
        assert await first is True
        assert ctl.state.consultation.result_text == "advice for NONE"
        assert not ctl.state.consulting

    asyncio.run(scenario())


def test_persona_switch_resets_consultation(fake_client):
    async def scenario():
        gw = GatedGateway(fake_client)
        ctl = SessionController(gw)
        await ctl.select(DOCTOR)
        ctl.attach_consultation_image("data:image/png;base64,Q1VU")

        pending = asyncio.create_task(ctl.submit_consultation("deep cut"))
        await asyncio.sleep(0)
        await ctl.select(NONE)
        assert ctl.state.consultation.image is None
        assert ctl.state.consultation.input_text == ""

        gw.gate(("consult", DOCTOR)).set()
        await pending
        assert ctl.state.consultation.result_text is None
        assert not ctl.state.consulting

    asyncio.run(scenario())


def test_action_follows_active_persona(controller):
    assert controller.action() is None
    asyncio.run(controller.select(DOCTOR))
    assert controller.action().href == "tel:112"
    controller.update_location(6.5, 3.4)
    asyncio.run(controller.select(HANDYMAN))
    assert controller.action().href.endswith("@6.5,3.4,14z")
