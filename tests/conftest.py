from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from convo_controls.control_core.config_types import QuestionnaireControlConfig, resolve_config
from convo_controls.control_core.control import QuestionnaireControl
from convo_controls.control_core.handlers.base import TurnFrame
from convo_controls.control_core.ir import Choice, InputEvent, Question, QuestionnaireModel
from convo_controls.control_core.state import QuestionnaireState, TurnContext
from convo_controls.settings import get_settings


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: Fast unit tests of a single component")


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Each test sees settings built from its own environment."""
    for name in ("LOG_LEVEL", "DEVELOPMENT_MODE", "AMBIGUOUS_MATCH_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def health_model() -> QuestionnaireModel:
    return QuestionnaireModel(
        questions=[
            Question(id="cough", target_tags=frozenset({"builtin_it", "cough"})),
            Question(id="headache", target_tags=frozenset({"builtin_it", "headache"})),
        ],
        choices=[Choice(id="never"), Choice(id="sometimes"), Choice(id="often")],
        implied_choice_for_affirm="often",
        implied_choice_for_deny="never",
    )


@pytest.fixture
def make_control(health_model: QuestionnaireModel) -> Callable[..., QuestionnaireControl]:
    """Build a control over the health model; keyword args override the config."""

    def _make(**overrides: Any) -> QuestionnaireControl:
        overrides.setdefault("questionnaire", health_model)
        return QuestionnaireControl(QuestionnaireControlConfig(id="healthScreen", **overrides))

    return _make


@pytest.fixture
def control(make_control: Callable[..., QuestionnaireControl]) -> QuestionnaireControl:
    return make_control()


@pytest.fixture
def make_frame(health_model: QuestionnaireModel) -> Callable[..., TurnFrame]:
    """Build a turn frame without going through the controller."""

    def _make(
        event: InputEvent | None = None,
        state: QuestionnaireState | None = None,
        **overrides: Any,
    ) -> TurnFrame:
        overrides.setdefault("questionnaire", health_model)
        config = resolve_config(QuestionnaireControlConfig(id="healthScreen", **overrides))
        context = TurnContext()
        return TurnFrame(
            control_id=config.id,
            context=context,
            state=state or QuestionnaireState(),
            model=config.questionnaire(context),
            config=config,
            event=event,
        )

    return _make
