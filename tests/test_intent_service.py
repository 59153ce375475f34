import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock, AsyncMock
import pytest

from core.exceptions import IntentRelayError
from services.intent_service import IntentService, extract_image_url


def fragment(image=None, payload=None, card=None):
    return SimpleNamespace(
        image=SimpleNamespace(image_uri=image or ""),
        payload=payload or {},
        card=SimpleNamespace(image_uri=card or ""),
    )


def test_no_fragments_means_no_image():
    assert extract_image_url([]) is None
    assert extract_image_url(None) is None
    assert extract_image_url([fragment()]) is None


@pytest.mark.parametrize("frag,expected", [
    (fragment(image="https://img/inline.png"), "https://img/inline.png"),
    (fragment(payload={"image_url": "https://img/payload.png"}), "https://img/payload.png"),
    (fragment(card="https://img/card.png"), "https://img/card.png"),
])
def test_each_image_source_is_recognised(frag, expected):
    assert extract_image_url([frag]) == expected


def test_first_source_wins_within_a_fragment():
    frag = fragment(image="https://img/inline.png",
                    payload={"image_url": "https://img/payload.png"},
                    card="https://img/card.png")
    assert extract_image_url([frag]) == "https://img/inline.png"

    frag = fragment(payload={"image_url": "https://img/payload.png"}, card="https://img/card.png")
    assert extract_image_url([frag]) == "https://img/payload.png"


def test_later_fragment_overrides_earlier():
    frags = [fragment(image="https://img/1.png"), fragment(), fragment(card="https://img/3.png")]
    assert extract_image_url(frags) == "https://img/3.png"


def test_payload_without_image_url_is_ignored():
    assert extract_image_url([fragment(payload={"text": "hi"})]) is None


def make_client(result=None, error=None):
    client = MagicMock()
    client.session_path = MagicMock(side_effect=lambda project, session: f"projects/{project}/agent/sessions/{session}")
    if error is not None:
        client.detect_intent = AsyncMock(side_effect=error)
    else:
        client.detect_intent = AsyncMock(return_value=SimpleNamespace(query_result=result))
    return client


@pytest.mark.asyncio
async def test_detect_intent_builds_reply():
    result = SimpleNamespace(
        fulfillment_text="Kakapos can live up to 90 years.",
        intent=SimpleNamespace(display_name="kakapo.lifespan"),
        fulfillment_messages=[fragment(card="https://img/old-kakapo.png")],
    )
    client = make_client(result)
    service = IntentService(client=client)

    reply = await service.detect_intent("how old do they get", "abc")

    assert reply.message == "Kakapos can live up to 90 years."
    assert reply.intent == "kakapo.lifespan"
    assert reply.image_url == "https://img/old-kakapo.png"

    request = client.detect_intent.call_args.kwargs["request"]
    assert request["session"] == f"projects/{service.project_id}/agent/sessions/abc"
    assert request["query_input"]["text"] == {"text": "how old do they get", "language_code": "en"}


@pytest.mark.asyncio
async def test_detect_intent_failure_is_wrapped():
    service = IntentService(client=make_client(error=RuntimeError("permission denied")))

    with pytest.raises(IntentRelayError, match="permission denied"):
        await service.detect_intent("hi", "abc")


@pytest.mark.asyncio
async def test_detect_intent_timeout():
    async def slow(request):
        await asyncio.sleep(5)

    client = make_client()
    client.detect_intent = slow
    service = IntentService(client=client)
    service.timeout = 0.05

    with pytest.raises(IntentRelayError):
        await service.detect_intent("hi", "abc")


@pytest.mark.asyncio
async def test_missing_credentials_file(tmp_path):
    service = IntentService()
    service.credentials_path = str(tmp_path / "missing.json")

    assert not service.has_credentials
    with pytest.raises(IntentRelayError, match="Credentials file not found"):
        await service.detect_intent("hi", "abc")
