class Messages:
    _TEXTS = {
        "QUIZ_WELCOME": "🎉 **Welcome to the Kakapo Quiz!** 🦜\n\nTest your knowledge! I'll ask you {total} questions.",
        "QUIZ_START_ERROR": "Sorry, error starting quiz. Please try again!",
        "QUESTION": (
            "🎯 **Question {number}/{total}**\n\n"
            "{text}\n\n"
            "**A)** {A}\n"
            "**B)** {B}\n"
            "**C)** {C}\n"
            "**D)** {D}\n\n"
            "Reply with A, B, C, or D! 🦜"
        ),
        "INVALID_ANSWER": "❌ Please answer with A, B, C, or D only!",
        "CORRECT": "✅ **Correct!** {explanation}",
        "INCORRECT": "❌ **Incorrect.** The answer was **{correct}**. {explanation}",
        "QUIZ_COMPLETE": "🎉 **Quiz Complete!** 🦜\n\n{emoji} You scored **{score}/{total}** ({percentage}%)\n\n{message}",
        "QUIZ_CANCELLED": "Quiz cancelled.",
        "NO_ACTIVE_QUIZ": "No active quiz to cancel.",
    }

    @classmethod
    def get(cls, key: str) -> str:
        return cls._TEXTS.get(key, key)


class Intents:
    START = "quiz.start"
    ANSWER = "quiz.answer"
    INVALID = "quiz.invalid"
    COMPLETE = "quiz.complete"
    CANCELLED = "quiz.cancelled"
    NO_ACTIVE = "quiz.no_active"
    ERROR = "quiz.error"


CANCEL_KEYWORD = "cancel_quiz"
QUIZ_KEYWORDS = ["quiz", "test", "take quiz", "start quiz", "quiz mode"]
