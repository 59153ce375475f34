import os
import asyncio
from typing import Iterable, Optional
from google.cloud import dialogflow
from core.config import settings
from core.exceptions import IntentRelayError
from core.logger import logger
from models.quiz import Reply


def _payload_image(payload) -> Optional[str]:
    if not payload:
        return None
    try:
        value = payload.get("image_url")
    except AttributeError:
        return None
    return value or None


def extract_image_url(fulfillment_messages: Iterable) -> Optional[str]:
    """
    Pick an image URL out of Dialogflow rich responses.

    Each message is checked for an inline image, then a custom payload
    ``image_url`` field, then a card image; the first hit counts for that
    message. A later message with an image overrides an earlier one.
    """
    image_url = None
    for msg in fulfillment_messages or []:
        image = getattr(msg, "image", None)
        card = getattr(msg, "card", None)
        candidate = (
            getattr(image, "image_uri", None)
            or _payload_image(getattr(msg, "payload", None))
            or getattr(card, "image_uri", None)
        )
        if candidate:
            image_url = candidate
    return image_url


class IntentService:
    """Forwards free-text messages to a Dialogflow ES agent."""

    def __init__(self, client: Optional[dialogflow.SessionsAsyncClient] = None):
        self.project_id = settings.DIALOGFLOW_PROJECT_ID
        self.language_code = settings.DIALOGFLOW_LANGUAGE_CODE
        self.timeout = settings.INTENT_RELAY_TIMEOUT_SECONDS
        self.credentials_path = settings.credentials_path
        self._client = client

    @property
    def has_credentials(self) -> bool:
        return self._client is not None or os.path.exists(self.credentials_path)

    def _get_client(self) -> dialogflow.SessionsAsyncClient:
        if self._client is None:
            if not os.path.exists(self.credentials_path):
                raise IntentRelayError(f"Credentials file not found at: {self.credentials_path}")
            logger.info("Using Dialogflow credentials from file", path=self.credentials_path)
            self._client = dialogflow.SessionsAsyncClient.from_service_account_file(self.credentials_path)
        return self._client

    async def detect_intent(self, message: str, session_id: str) -> Reply:
        client = self._get_client()
        session_path = client.session_path(self.project_id, session_id)
        request = {
            "session": session_path,
            "query_input": {"text": {"text": message, "language_code": self.language_code}},
        }

        try:
            response = await asyncio.wait_for(client.detect_intent(request=request), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise IntentRelayError(f"Dialogflow did not answer within {self.timeout}s")
        except Exception as e:
            logger.error("Dialogflow request failed", session_id=session_id, error=str(e))
            raise IntentRelayError(str(e)) from e

        result = response.query_result
        intent = result.intent.display_name if result.intent else ""
        return Reply(
            message=result.fulfillment_text,
            image_url=extract_image_url(result.fulfillment_messages),
            intent=intent,
        )
