from models.quiz import Reply
from services.quiz_service import QuizService
from services.intent_service import IntentService
from constants.messages import CANCEL_KEYWORD, QUIZ_KEYWORDS
from core.logger import logger


def is_cancel_request(message: str) -> bool:
    return message.strip().lower() == CANCEL_KEYWORD


def is_quiz_request(message: str) -> bool:
    text = message.lower()
    return any(keyword in text for keyword in QUIZ_KEYWORDS)


class ChatService:
    """Decides whether a message is quiz traffic or goes to Dialogflow."""

    def __init__(self, quiz_service: QuizService, intent_service: IntentService):
        self.quiz_service = quiz_service
        self.intent_service = intent_service

    async def handle(self, message: str, session_id: str) -> Reply:
        quiz = self.quiz_service

        async with quiz.session_lock(session_id):
            # Cancel wins over everything else
            if is_cancel_request(message):
                return await quiz.cancel(session_id)

            active = await quiz.is_active(session_id)
            if not active and is_quiz_request(message):
                return await quiz.start(session_id)

            # An active quiz swallows every message until it ends
            if active:
                reply = await quiz.answer(message, session_id)
                if reply is not None:
                    return reply

        logger.debug("Relaying message to Dialogflow", session_id=session_id)
        return await self.intent_service.detect_intent(message, session_id)
