import re
import json
import asyncio
from typing import List, Optional
from google import genai
from core.config import settings
from core.exceptions import QuestionSourceError
from core.logger import logger
from models.quiz import Question
from constants.fallback_questions import get_fallback_questions

QUESTION_COUNT = 10

QUIZ_PROMPT = """Generate exactly 10 multiple choice questions about Kakapo birds (New Zealand parrots).

Rules:
1. Each question must have exactly 4 options (A, B, C, D)
2. Only ONE correct answer per question
3. Mix difficulty: 3 easy, 4 medium, 3 hard questions
4. Cover these topics: habitat, diet, behavior, conservation status, physical characteristics, breeding, threats
5. Return ONLY valid JSON, no markdown, no explanations, no code blocks

Format as a JSON array exactly like this:
[
  {
    "question": "What is the Kakapo?",
    "options": {
      "A": "A type of owl",
      "B": "A flightless parrot",
      "C": "A bat species",
      "D": "A lizard"
    },
    "correct_answer": "B",
    "explanation": "The Kakapo is the world's only flightless parrot, native to New Zealand."
  }
]

Generate exactly 10 questions now:"""

_FENCE_RE = re.compile(r"```(?:json)?\n?")


class AIService:
    """Quiz question source backed by Gemini, with a built-in fallback set."""

    def __init__(self, client: Optional[genai.Client] = None):
        self.api_key = settings.GEMINI_API_KEY
        self.model = settings.GEMINI_MODEL
        self.timeout = settings.QUESTION_SOURCE_TIMEOUT_SECONDS
        if client is None and self.api_key:
            client = genai.Client(api_key=self.api_key)
        self.client = client

    async def get_questions(self) -> List[Question]:
        """
        Return exactly QUESTION_COUNT questions. Never raises: any generation
        problem is logged and the fallback set is returned instead.
        """
        logger.info("Quiz generation started", model=self.model, key_configured=bool(self.api_key))
        try:
            questions = await self.generate_quiz()
        except QuestionSourceError as e:
            logger.warning("Quiz generation failed, using fallback questions", error=str(e))
            return get_fallback_questions()

        logger.info("Quiz generation succeeded", total=len(questions))
        return questions

    async def generate_quiz(self) -> List[Question]:
        if self.client is None:
            raise QuestionSourceError("GEMINI_API_KEY is not configured")

        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(model=self.model, contents=QUIZ_PROMPT),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise QuestionSourceError(f"No response from Gemini within {self.timeout}s")
        except Exception as e:
            raise QuestionSourceError(f"Gemini request failed: {e}") from e

        text = response.text or ""
        logger.debug("Gemini response received", length=len(text))

        items = self._parse_response(text)
        if len(items) != QUESTION_COUNT:
            raise QuestionSourceError(f"Invalid number of questions: {len(items)}")

        questions = self._validate_questions(items)
        if len(questions) != len(items):
            raise QuestionSourceError(f"{len(items) - len(questions)} malformed question(s) in response")
        return questions

    def _parse_response(self, content: str) -> list:
        """Strip markdown fences and parse the JSON array."""
        content = _FENCE_RE.sub("", content).strip()
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            raise QuestionSourceError(f"Response is not valid JSON: {e}") from e

        if not isinstance(parsed, list):
            raise QuestionSourceError(f"Expected a JSON array, got {type(parsed).__name__}")
        return parsed

    def _validate_questions(self, items: list) -> List[Question]:
        validated = []
        for i, item in enumerate(items):
            question = Question.from_generated(item)
            if question is None:
                logger.warning("Question validation failed", index=i)
                continue
            validated.append(question)
        return validated
