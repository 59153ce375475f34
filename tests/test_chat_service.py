import asyncio
import pytest

from conftest import RecordingIntentService
from constants.messages import Intents
from core.exceptions import IntentRelayError
from services.chat_service import ChatService, is_cancel_request, is_quiz_request

SID = "chat-1"


@pytest.fixture
def chat(quiz_service, intent_service):
    return ChatService(quiz_service, intent_service)


@pytest.mark.parametrize("message", ["cancel_quiz", "CANCEL_QUIZ", "  Cancel_Quiz \n"])
def test_cancel_keyword_matches(message):
    assert is_cancel_request(message)


@pytest.mark.parametrize("message", ["cancel", "please cancel_quiz", "cancel quiz"])
def test_cancel_keyword_must_be_exact(message):
    assert not is_cancel_request(message)


@pytest.mark.parametrize("message,expected", [
    ("quiz", True), ("Start Quiz please", True), ("can you test me?", True),
    ("QUIZ MODE", True), ("hello", False), ("tell me about kakapos", False),
])
def test_quiz_keywords(message, expected):
    assert is_quiz_request(message) is expected


@pytest.mark.asyncio
async def test_normal_message_goes_to_dialogflow(chat, intent_service):
    reply = await chat.handle("hello", SID)

    assert reply.intent == "Default Welcome Intent"
    assert intent_service.calls == [("hello", SID)]


@pytest.mark.asyncio
async def test_full_scenario(chat, store, intent_service):
    reply = await chat.handle("start quiz", SID)
    assert reply.intent == Intents.START
    session = await store.get(SID)
    assert session.current_index == 0

    q1, q2 = session.questions[0], session.questions[1]
    await chat.handle(q1.correct_letter, SID)
    session = await store.get(SID)
    assert (session.score, session.current_index) == (1, 1)

    wrong = next(letter for letter in "ABCD" if letter != q2.correct_letter)
    await chat.handle(wrong, SID)
    session = await store.get(SID)
    assert (session.score, session.current_index) == (1, 2)

    reply = await chat.handle("E", SID)
    assert reply.intent == Intents.INVALID
    session = await store.get(SID)
    assert (session.score, session.current_index, len(session.answers)) == (1, 2, 2)

    reply = await chat.handle("cancel_quiz", SID)
    assert reply.intent == Intents.CANCELLED
    assert await store.get(SID) is None
    assert intent_service.calls == []


@pytest.mark.asyncio
async def test_cancel_without_quiz(chat, intent_service):
    reply = await chat.handle("cancel_quiz", SID)

    assert reply.intent == Intents.NO_ACTIVE
    assert intent_service.calls == []


@pytest.mark.asyncio
async def test_active_quiz_intercepts_quiz_keywords(chat, question_source, intent_service):
    await chat.handle("quiz", SID)

    reply = await chat.handle("take quiz", SID)

    assert reply.intent == Intents.INVALID
    assert question_source.calls == 1
    assert intent_service.calls == []


@pytest.mark.asyncio
async def test_completed_quiz_releases_session(chat, store, intent_service):
    await chat.handle("quiz", SID)
    for question in (await store.get(SID)).questions:
        reply = await chat.handle(question.correct_letter, SID)

    assert reply.intent == Intents.COMPLETE
    assert not await chat.quiz_service.is_active(SID)

    await chat.handle("A", SID)
    assert intent_service.calls == [("A", SID)]


@pytest.mark.asyncio
async def test_sessions_are_independent(chat, store):
    await chat.handle("quiz", "one")

    reply = await chat.handle("quiz", "two")

    assert reply.intent == Intents.START
    assert (await store.get("one")) is not (await store.get("two"))


@pytest.mark.asyncio
async def test_double_submitted_answer_is_graded_once_per_question(chat, store):
    await chat.handle("quiz", SID)
    q1 = (await store.get(SID)).questions[0]

    replies = await asyncio.gather(chat.handle(q1.correct_letter, SID), chat.handle(q1.correct_letter, SID))

    session = await store.get(SID)
    assert session.current_index == 2
    assert len(session.answers) == 2
    assert [a.question_text for a in session.answers] == [q.text for q in session.questions[:2]]
    assert all(r.intent == Intents.ANSWER for r in replies)


@pytest.mark.asyncio
async def test_relay_errors_propagate(quiz_service):
    chat = ChatService(quiz_service, RecordingIntentService(error=IntentRelayError("down")))

    with pytest.raises(IntentRelayError):
        await chat.handle("hello", SID)
