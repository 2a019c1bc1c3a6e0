import json
import os
import tempfile

# Point the app at a throwaway SQLite file before anything imports settings.
_TMP_DIR = tempfile.mkdtemp(prefix="studypack-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["ENV"] = "test"
os.environ.setdefault("LOG_JSON", "0")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.api.deps import get_generation_client  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402

USER_ID = "user-1"
OTHER_USER_ID = "user-2"

SAMPLE_TEXT = (
    "Photosynthesis is the process by which green plants, algae and some bacteria convert light "
    "energy into chemical energy. During photosynthesis, light energy is captured by chlorophyll "
    "and used to convert water and carbon dioxide into glucose and oxygen. The light-dependent "
    "reactions take place in the thylakoid membranes of the chloroplast, where water is split and "
    "oxygen is released as a by-product. The energy captured is stored in ATP and NADPH. The "
    "Calvin cycle, also called the light-independent reactions, takes place in the stroma. There "
    "the enzyme RuBisCO fixes carbon dioxide into a three-carbon sugar, which the plant later uses "
    "to build glucose, starch and cellulose. Factors that limit the rate of photosynthesis include "
    "light intensity, carbon dioxide concentration and temperature. Plants in hot, dry climates "
    "have evolved C4 and CAM pathways that reduce water loss and limit photorespiration. Without "
    "photosynthesis, almost all life on Earth would lack its primary source of energy and the "
    "atmosphere would contain very little oxygen. Scientists study photosynthesis to improve crop "
    "yields and to design artificial systems that turn sunlight into fuel."
)


def make_payload(n_cards: int = 5, n_quiz: int = 3, n_topics: int = 6) -> dict:
    return {
        "summary": "Photosynthesis turns light, water and carbon dioxide into glucose and oxygen.",
        "topics": [f"topic {i}" for i in range(n_topics)],
        "flashcards": [{"question": f"Question {i}?", "answer": f"Answer {i}."} for i in range(n_cards)],
        "quizzes": [
            {
                "question": f"Quiz question {i}?",
                "options": ["Chlorophyll", "Mitochondria", "Ribosome", "Nucleus"],
                "correctAnswer": "Chlorophyll",
            }
            for i in range(n_quiz)
        ],
    }


class StubGenerationClient:
    """Records prompts and replays a canned reply."""

    def __init__(self, reply: str | None = None, error: Exception | None = None):
        self.reply = reply if reply is not None else json.dumps(make_payload())
        self.error = error
        self.calls: list[dict] = []

    def generate(self, prompt: str, *, json_mode: bool = True) -> str:
        self.calls.append({"prompt": prompt, "json_mode": json_mode})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def stub_llm():
    stub = StubGenerationClient()
    app.dependency_overrides[get_generation_client] = lambda: stub
    yield stub
    app.dependency_overrides.pop(get_generation_client, None)


@pytest.fixture
def client(stub_llm):
    with TestClient(app) as c:
        c.headers.update({"X-User-Id": USER_ID})
        yield c


def auth(user_id: str) -> dict:
    return {"X-User-Id": user_id}
