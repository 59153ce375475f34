class KakapoError(Exception):
    """Base class for errors raised by the chat relay."""


class QuestionSourceError(KakapoError):
    """Quiz generation failed or returned something unusable."""


class IntentRelayError(KakapoError):
    """Dialogflow could not be reached or returned an error."""


class SessionNotFound(KakapoError):
    def __init__(self, session_id: str):
        super().__init__(f"No quiz session for {session_id}")
        self.session_id = session_id


class ConcurrentModification(KakapoError):
    """Another request for the same session is still in flight."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} is busy, try again")
        self.session_id = session_id
