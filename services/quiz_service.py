import re
from typing import NamedTuple, Optional
from models.quiz import Question, AnsweredRecord, Reply
from models.session import QuizSession
from services.ai_service import AIService
from services.session_service import SessionStore
from constants.messages import Messages, Intents
from core.exceptions import SessionNotFound
from core.logger import logger

_ANSWER_RE = re.compile(r"^[ABCD]$")


class ScoreTier(NamedTuple):
    threshold: int
    label: str
    emoji: str
    message: str


# Highest threshold first
SCORE_TIERS = (
    ScoreTier(80, "expert", "🌟", "Amazing! You're a Kakapo expert!"),
    ScoreTier(60, "great", "💚", "Great job!"),
    ScoreTier(40, "good", "🌿", "Good effort!"),
    ScoreTier(0, "novice", "🦜", "Nice try!"),
)


def score_percentage(score: int, total: int) -> int:
    """Percentage rounded half up."""
    if total <= 0:
        return 0
    return (200 * score + total) // (2 * total)


def score_tier(percentage: int) -> ScoreTier:
    for tier in SCORE_TIERS:
        if percentage >= tier.threshold:
            return tier
    return SCORE_TIERS[-1]


def format_question(question: Question, number: int, total: int) -> str:
    return Messages.get("QUESTION").format(
        number=number,
        total=total,
        text=question.text,
        **question.options,
    )


class QuizService:
    """
    Per-session quiz state machine.

    Callers are expected to hold ``session_lock(session_id)`` around any
    sequence of calls for one session; the methods themselves do not lock.
    """

    def __init__(self, store: SessionStore, question_source: AIService):
        self.store = store
        self.question_source = question_source

    def session_lock(self, session_id: str):
        return self.store.lock(session_id)

    async def is_active(self, session_id: str) -> bool:
        session = await self.store.get(session_id)
        return session is not None and session.active

    async def start(self, session_id: str) -> Reply:
        existing = await self.store.get(session_id)
        if existing is not None:
            logger.warning("Replacing existing quiz session", session_id=session_id,
                           answered=existing.current_index)

        questions = await self.question_source.get_questions()
        session = QuizSession(questions=questions)
        try:
            await self.store.save(session_id, session)
        except Exception:
            logger.exception("Failed to store quiz session", session_id=session_id)
            return Reply(message=Messages.get("QUIZ_START_ERROR"), intent=Intents.ERROR)

        logger.info("Quiz started", session_id=session_id, total=session.total)
        welcome = Messages.get("QUIZ_WELCOME").format(total=session.total)
        first = format_question(session.current_question, 1, session.total)
        return Reply(message=f"{welcome}\n\n{first}", intent=Intents.START)

    async def answer(self, message: str, session_id: str) -> Optional[Reply]:
        """Grade one answer. Returns None if the session has no active quiz."""
        session = await self.store.get(session_id)
        if session is None or not session.active:
            return None

        letter = message.strip().upper()
        if not _ANSWER_RE.match(letter):
            return Reply(message=Messages.get("INVALID_ANSWER"), intent=Intents.INVALID)

        question = session.current_question
        is_correct = letter == question.correct_letter
        if is_correct:
            session.score += 1
        session.answers.append(AnsweredRecord(
            question_text=question.text,
            user_letter=letter,
            correct_letter=question.correct_letter,
            was_correct=is_correct,
        ))
        session.current_index += 1
        await self.store.save(session_id, session)

        logger.info("Quiz answer graded", session_id=session_id, index=session.current_index,
                    correct=is_correct, score=session.score)

        if session.is_finished:
            return await self.complete(session_id)

        if is_correct:
            feedback = Messages.get("CORRECT").format(explanation=question.explanation)
        else:
            feedback = Messages.get("INCORRECT").format(correct=question.correct_letter,
                                                        explanation=question.explanation)
        next_question = format_question(session.current_question, session.current_index + 1, session.total)
        return Reply(message=f"{feedback}\n\n{next_question}", intent=Intents.ANSWER)

    async def complete(self, session_id: str) -> Reply:
        session = await self.store.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)

        percentage = score_percentage(session.score, session.total)
        tier = score_tier(percentage)
        await self.store.delete(session_id)

        logger.info("Quiz completed", session_id=session_id, score=session.score,
                    total=session.total, percentage=percentage, tier=tier.label)
        return Reply(
            message=Messages.get("QUIZ_COMPLETE").format(
                emoji=tier.emoji,
                score=session.score,
                total=session.total,
                percentage=percentage,
                message=tier.message,
            ),
            intent=Intents.COMPLETE,
        )

    async def cancel(self, session_id: str) -> Reply:
        session = await self.store.get(session_id)
        if session is None:
            return Reply(message=Messages.get("NO_ACTIVE_QUIZ"), intent=Intents.NO_ACTIVE)

        await self.store.delete(session_id)
        logger.info("Quiz cancelled", session_id=session_id,
                    answered=session.current_index, score=session.score)
        return Reply(message=Messages.get("QUIZ_CANCELLED"), intent=Intents.CANCELLED)
