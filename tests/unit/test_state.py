import pytest

from convo_controls.control_core.state import Answer, AnswerStore, FocusState, QuestionnaireState, TurnContext


@pytest.mark.unit
def test_answer_store_record_overwrites_and_returns_previous():
    store = AnswerStore()

    assert store.record("cough", Answer("often")) is None
    previous = store.record("cough", Answer("never", at_risk_of_misunderstanding=True))

    assert previous == Answer("often")
    assert store.get("cough") == Answer("never", True)
    assert len(store) == 1
    assert "cough" in store


@pytest.mark.unit
def test_answer_store_remove_and_clear():
    store = AnswerStore()
    store.record("cough", Answer("often"))
    store.record("headache", Answer("never"))

    assert store.remove("cough") == Answer("often")
    assert store.remove("cough") is None
    assert store.answered_ids() == {"headache"}

    store.clear()
    assert store.is_empty()
    assert store.get(None) is None


@pytest.mark.unit
def test_snapshot_is_detached_from_store():
    store = AnswerStore()
    store.record("cough", Answer("often"))

    snapshot = store.snapshot()
    store.record("headache", Answer("never"))

    assert list(snapshot) == ["cough"]


@pytest.mark.unit
def test_state_serializes_with_camel_case_keys():
    state = QuestionnaireState(focus=FocusState(focus_question_id="headache", active_initiative_name="AskQuestion"))
    state.answers.record("cough", Answer("often", at_risk_of_misunderstanding=True))

    data = state.to_dict()

    assert data == {
        "value": {"cough": {"choiceId": "often", "atRiskOfMisunderstanding": True}},
        "focusQuestionId": "headache",
        "activeInitiativeName": "AskQuestion",
    }
    assert QuestionnaireState.from_dict(data) == state


@pytest.mark.unit
def test_state_from_partial_dict_defaults():
    state = QuestionnaireState.from_dict({"value": {"cough": {"choiceId": "never"}}})

    assert state.answers.get("cough") == Answer("never", False)
    assert state.focus == FocusState()


@pytest.mark.unit
def test_copy_is_deep():
    state = QuestionnaireState()
    clone = state.copy()
    clone.answers.record("cough", Answer("often"))
    clone.focus.focus_question_id = "cough"

    assert state.is_idle
    assert not clone.is_idle


@pytest.mark.unit
def test_clear_resets_answers_and_focus():
    state = QuestionnaireState(focus=FocusState("cough", "AskQuestion"))
    state.answers.record("cough", Answer("often"))

    state.clear()

    assert state == QuestionnaireState()


@pytest.mark.unit
def test_turn_context_generates_unique_ids():
    first, second = TurnContext(), TurnContext()

    assert first.turn_id != second.turn_id
    assert TurnContext(attributes={"screen": True}).get("screen") is True
    assert first.get("missing", "default") == "default"
