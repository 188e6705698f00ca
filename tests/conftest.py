import asyncio
import json

import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.services.question_client import EnrichmentFetchError, QuestionEnrichmentClient
from app.services.survey_sessions import SessionRegistry, get_session_registry

TRIVIA_URL = "https://trivia.test/api.php"
TOPIC_CATEGORIES = {"Technology": 18, "Health": 17, "Education": 9}

CATEGORY_QUESTIONS = {
    "18": ["What does &quot;CPU&quot; stand for?", "Which language has a GIL?"],
    "17": ["How many bones are in the human body?"],
    "9": [],
}


def trivia_handler(request: httpx.Request) -> httpx.Response:
    """Serves Open Trivia DB shaped responses keyed by category"""
    questions = CATEGORY_QUESTIONS.get(request.url.params.get("category"))
    if not questions:
        return httpx.Response(200, json={"response_code": 1, "results": []})
    results = [{"category": "Test", "question": q, "correct_answer": "x"} for q in questions]
    return httpx.Response(200, json={"response_code": 0, "results": results})


def make_client(handler=trivia_handler) -> QuestionEnrichmentClient:
    return QuestionEnrichmentClient(
        api_url=TRIVIA_URL,
        topic_categories=TOPIC_CATEGORIES,
        amount=5,
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


class GatedQuestionClient:
    """Question client whose fetches stay pending until their topic is released"""

    def __init__(self, failing_topics=()):
        self.gates = {}
        self.calls = []
        self.tasks = []
        self.failing_topics = set(failing_topics)

    def release(self, topic):
        self._gate(topic).set()

    def _gate(self, topic):
        return self.gates.setdefault(topic, asyncio.Event())

    async def fetch(self, topic):
        self.calls.append(topic)
        self.tasks.append(asyncio.current_task())
        await self._gate(topic).wait()
        if topic in self.failing_topics:
            raise EnrichmentFetchError(f"{topic} unavailable")
        return (f"{topic} question 1", f"{topic} question 2")


@pytest.fixture
def technology_values():
    return {
        "fullName": "Ada Lovelace",
        "email": "ada@example.com",
        "surveyTopic": "Technology",
        "favoriteLanguage": "Python",
        "yearsOfExperience": "7",
        "feedback": "Great survey, thanks!",
    }


@pytest.fixture
def health_values():
    return {
        "fullName": "A",
        "email": "a@b.com",
        "surveyTopic": "Health",
        "exerciseFrequency": "Daily",
        "dietPreference": "Vegan",
        "feedback": "1234567890",
    }


@pytest.fixture
async def gated_client():
    client = GatedQuestionClient()
    yield client
    for task in client.tasks:
        task.cancel()


@pytest.fixture
def question_client():
    return make_client()


@pytest.fixture
def registry():
    return SessionRegistry(client_factory=make_client, reset_on_close=True)


@pytest.fixture
async def api_client(registry):
    app.dependency_overrides[get_session_registry] = lambda: registry
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def trivia_payload():
    """Helper for building raw Open Trivia DB bodies"""
    def build(code, questions=()):
        return json.dumps({
            "response_code": code,
            "results": [{"question": q} for q in questions],
        })
    return build


@pytest.fixture
async def failing_gated_client():
    client = GatedQuestionClient(failing_topics={"Technology"})
    yield client
    for task in client.tasks:
        task.cancel()


@pytest.fixture
def client_with_handler():
    """Builds a question client backed by the given mock request handler"""
    return make_client
