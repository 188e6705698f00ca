"""Open Trivia DB client for the confirmation view's additional questions"""
import html
import httpx
from typing import Dict, Optional, Tuple
import logging

from app.config import get_settings

logger = logging.getLogger(__name__)

# Open Trivia DB response codes
RESPONSE_SUCCESS = 0
RESPONSE_NO_RESULTS = 1


class EnrichmentFetchError(Exception):
    """The question service could not be reached or returned something unusable"""


class QuestionEnrichmentClient:
    """Fetches supplementary questions for a survey topic"""

    def __init__(
        self,
        api_url: str,
        topic_categories: Dict[str, int],
        amount: int = 5,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.topic_categories = dict(topic_categories)
        self.amount = amount
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, topic: str) -> Tuple[str, ...]:
        """
        Fetch questions for a survey topic

        Args:
            topic: Survey topic, e.g. "Technology"

        Returns:
            Question texts in service order; empty if the topic has no category
            or the service has no questions for it

        Raises:
            EnrichmentFetchError: On transport errors, error statuses or bad payloads
        """
        category = self.topic_categories.get(topic)
        if category is None:
            logger.info(f"No question category configured for topic '{topic}'")
            return ()

        params = {"amount": self.amount, "category": category}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.api_url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise EnrichmentFetchError(f"Question service request failed: {e}") from e
        except ValueError as e:
            raise EnrichmentFetchError(f"Question service returned invalid JSON: {e}") from e

        return self._parse(payload, topic)

    @staticmethod
    def _parse(payload, topic: str) -> Tuple[str, ...]:
        if not isinstance(payload, dict):
            raise EnrichmentFetchError("Question service payload is not an object")

        code = payload.get("response_code")
        if code == RESPONSE_NO_RESULTS:
            logger.info(f"Question service has no questions for topic '{topic}'")
            return ()
        if code != RESPONSE_SUCCESS:
            raise EnrichmentFetchError(f"Question service response code {code}")

        results = payload.get("results")
        if not isinstance(results, list):
            raise EnrichmentFetchError("Question service payload has no results list")

        questions = []
        for item in results:
            if not isinstance(item, dict) or not isinstance(item.get("question"), str):
                raise EnrichmentFetchError("Question service result without question text")
            questions.append(html.unescape(item["question"]))

        logger.info(f"Fetched {len(questions)} questions for topic '{topic}'")
        return tuple(questions)


def get_question_client() -> QuestionEnrichmentClient:
    """Build a client from application settings"""
    settings = get_settings()
    return QuestionEnrichmentClient(
        api_url=settings.trivia_api_url,
        topic_categories=settings.topic_categories,
        amount=settings.trivia_question_amount,
        timeout=settings.trivia_timeout,
    )
