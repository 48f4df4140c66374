import pytest

from swipestudy.application.card_store import CardStore
from swipestudy.domain.constants import MS_PER_DAY
from swipestudy.domain.interfaces import AnswerGrader
from swipestudy.domain.models import Card, GradeResult
from swipestudy.infrastructure.adapters.json_store import MemoryStore

NOW = 1_700_000_000_000  # Fixed epoch ms for deterministic scheduling


class FakeClock:
    """Manually advanced clock returning epoch ms."""

    def __init__(self, start: int = NOW):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance_days(self, days: int) -> None:
        self.now += days * MS_PER_DAY


class ScriptedGrader(AnswerGrader):
    """
    Grader that replays a scripted verdict sequence per question.

    `script` maps a question prompt to a list of booleans; once a list is
    used up the last verdict repeats. Unscripted questions are correct.
    """

    def __init__(self, script: dict[str, list[bool]] | None = None):
        self.script = {k: list(v) for k, v in (script or {}).items()}
        self.calls: list[tuple[str, str, str]] = []

    async def evaluate(self, question, reference_answer, user_answer):
        self.calls.append((question, reference_answer, user_answer))
        verdicts = self.script.get(question)
        if not verdicts:
            return GradeResult(is_correct=True, feedback="ok")
        verdict = verdicts.pop(0) if len(verdicts) > 1 else verdicts[0]
        return GradeResult(is_correct=verdict, feedback="ok" if verdict else "nope")


class FlakyStore(MemoryStore):
    """MemoryStore whose writes fail while `failing` is set."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.failing = False

    def write(self, key, value):
        if self.failing:
            raise OSError("disk full")
        super().write(key, value)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_card():
    """Factory for cards due now in the default folder."""

    def _make(card_id: str = "c1", folder_id: str = "f1", **overrides) -> Card:
        fields = {
            "id": card_id,
            "folder_id": folder_id,
            "front": f"front {card_id}",
            "back": f"back {card_id}",
            "next_review": NOW,
            "created_at": NOW,
        }
        fields.update(overrides)
        return Card(**fields)

    return _make


@pytest.fixture
def scripted_grader():
    """Factory for ScriptedGrader instances."""
    return ScriptedGrader


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return MemoryStore()


@pytest.fixture
def flaky_backend():
    return FlakyStore()


@pytest.fixture
def store(backend):
    return CardStore(backend)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config and data
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "SWIPESTUDY_DATA_DIR",
        "SWIPESTUDY_MASTERY_THRESHOLD",
        "SWIPESTUDY_DEFAULT_MODE",
        "SWIPESTUDY_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home
