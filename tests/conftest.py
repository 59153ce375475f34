"""
Pytest configuration and fixtures for the chat relay tests.
"""
import sys
import os
import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Configure pytest-asyncio
pytest_plugins = ('pytest_asyncio',)

from constants.fallback_questions import get_fallback_questions
from models.quiz import Reply
from services.quiz_service import QuizService
from services.session_service import InMemorySessionStore


class StaticQuestionSource:
    """Question source that always hands out the built-in set."""

    def __init__(self, questions=None):
        self.questions = questions or get_fallback_questions()
        self.calls = 0

    async def get_questions(self):
        self.calls += 1
        return list(self.questions)


class RecordingIntentService:
    """Stands in for Dialogflow and remembers what it was asked."""

    def __init__(self, reply=None, error=None):
        self.reply = reply or Reply(message="Kakapos are great!", image_url=None, intent="Default Welcome Intent")
        self.error = error
        self.calls = []

    async def detect_intent(self, message, session_id):
        self.calls.append((message, session_id))
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def questions():
    return get_fallback_questions()


@pytest.fixture
def store():
    return InMemorySessionStore(lock_wait=0.5)


@pytest.fixture
def question_source():
    return StaticQuestionSource()


@pytest.fixture
def quiz_service(store, question_source):
    return QuizService(store, question_source)


@pytest.fixture
def intent_service():
    return RecordingIntentService()


@pytest.fixture
def sample_generated_questions():
    """Ten questions in the generator's JSON shape"""
    return [
        {
            "question": f"Kakapo question {i}?",
            "options": {"A": "One", "B": "Two", "C": "Three", "D": "Four"},
            "correct_answer": "ABCD"[i % 4],
            "explanation": f"Because {i}.",
        }
        for i in range(10)
    ]
