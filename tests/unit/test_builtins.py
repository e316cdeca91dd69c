import pytest

from convo_controls.control_core.acts import AnswerConfirmedAct, AnswerDisconfirmedAct, AskQuestionAct, ConfirmAnswerAct
from convo_controls.control_core.builtins import QuestionnaireBuiltIns, implied_choice, implied_deny_handler
from convo_controls.control_core.confirmation import ConfirmationPolicy
from convo_controls.control_core.errors import InconsistentInvocationOrderError, UnknownQuestionReferenceError
from convo_controls.control_core.focus import FocusTracker
from convo_controls.control_core.ir import (
    Choice,
    ExplicitChoiceEvent,
    GeneralReferenceEvent,
    LaunchEvent,
    Question,
    QuestionnaireModel,
)
from convo_controls.control_core.state import Answer, FocusState, QuestionnaireState

YES = GeneralReferenceEvent(polarity="affirm")
NO = GeneralReferenceEvent(polarity="deny")


@pytest.fixture
def builtins() -> QuestionnaireBuiltIns:
    focus = FocusTracker()
    return QuestionnaireBuiltIns(focus, ConfirmationPolicy(focus))


def _asking(question_id: str = "cough") -> QuestionnaireState:
    return QuestionnaireState(focus=FocusState(question_id, "AskQuestion"))


def _confirming(question_id: str = "cough", choice_id: str = "often") -> QuestionnaireState:
    state = QuestionnaireState(focus=FocusState(question_id, "ConfirmAnswer"))
    state.answers.record(question_id, Answer(choice_id, at_risk_of_misunderstanding=True))
    return state


def _claims(builtins: QuestionnaireBuiltIns, frame) -> list[str]:
    return [h.name for h in builtins.turn_handlers() if h.can_handle(frame)]


def _handler(builtins: QuestionnaireBuiltIns, name: str):
    return next(h for h in builtins.turn_handlers() if h.name == name)


@pytest.mark.unit
def test_builtin_handler_order(builtins):
    assert [h.name for h in builtins.turn_handlers()] == [
        "launch",
        "direct_answer_implied",
        "direct_answer_explicit",
        "confirmation_affirmed",
        "confirmation_disconfirmed",
        "focus_question",
    ]
    assert [h.name for h in builtins.initiative_handlers()] == ["ask_question", "confirm_answer"]


@pytest.mark.unit
@pytest.mark.parametrize(
    "event,state,expected",
    [
        (LaunchEvent(), QuestionnaireState(), ["launch"]),
        (YES, _asking(), ["direct_answer_implied"]),
        (YES, QuestionnaireState(), []),
        (YES, QuestionnaireState(focus=FocusState("cough", None)), []),
        (NO, _asking(), []),
        (GeneralReferenceEvent(polarity="affirm", target_tag="headache"), _asking("cough"), []),
        (GeneralReferenceEvent(polarity="affirm", target_tag="cough"), _asking("cough"), ["direct_answer_implied"]),
        (GeneralReferenceEvent(polarity="affirm", action_tag="builtin_change"), _asking(), []),
        (ExplicitChoiceEvent(choice_id="often"), _asking(), ["direct_answer_explicit"]),
        (ExplicitChoiceEvent(choice_id="often"), QuestionnaireState(), []),
        (ExplicitChoiceEvent(choice_id="often", question_ref="headache"), QuestionnaireState(), ["direct_answer_explicit"]),
        (ExplicitChoiceEvent(choice_id="often", question_ref="fever"), _asking(), []),
        (ExplicitChoiceEvent(choice_id="always"), _asking(), []),
        (ExplicitChoiceEvent(choice_id="often", target_tag="headache"), _asking("cough"), []),
        (ExplicitChoiceEvent(choice_id="never"), _confirming(), ["direct_answer_explicit"]),
        (YES, _confirming(), ["confirmation_affirmed"]),
        (NO, _confirming(), ["confirmation_disconfirmed"]),
        (GeneralReferenceEvent(target_tag="headache"), _asking(), ["focus_question"]),
        (GeneralReferenceEvent(target_tag="builtin_it"), _asking(), []),
        (GeneralReferenceEvent(target_tag="headache", action_tag="builtin_change"), QuestionnaireState(), []),
    ],
)
def test_guards_claim_expected_events(builtins, make_frame, event, state, expected):
    assert _claims(builtins, make_frame(event, state.copy())) == expected


@pytest.mark.unit
def test_confirmation_guard_requires_an_answer(builtins, make_frame):
    state = QuestionnaireState(focus=FocusState("cough", "ConfirmAnswer"))

    assert _claims(builtins, make_frame(YES, state)) == []


@pytest.mark.unit
def test_implied_affirm_records_model_choice(builtins, make_frame):
    frame = make_frame(YES, _asking())

    _handler(builtins, "direct_answer_implied").apply(frame)

    assert frame.state.answers.get("cough") == Answer("often", False)
    assert frame.state.focus.active_initiative_name is None
    assert frame.acts == []


@pytest.mark.unit
def test_implied_answer_risk_is_configurable(builtins, make_frame):
    frame = make_frame(YES, _asking(), implied_answer_at_risk=True)

    _handler(builtins, "direct_answer_implied").apply(frame)

    assert frame.state.answers.get("cough") == Answer("often", True)


@pytest.mark.unit
def test_implied_affirm_on_stale_focus_raises(builtins, make_frame):
    frame = make_frame(YES, _asking("ghost"))
    handler = _handler(builtins, "direct_answer_implied")

    assert handler.can_handle(frame)
    with pytest.raises(UnknownQuestionReferenceError):
        handler.apply(frame)


@pytest.mark.unit
def test_implied_choice_precedence(make_frame):
    bare_model = QuestionnaireModel(
        questions=[Question(id="q1")],
        choices=[Choice(id="low"), Choice(id="mid"), Choice(id="high")],
    )

    assert implied_choice(make_frame(), "affirm") == "often"
    assert implied_choice(make_frame(), "deny") == "never"
    assert implied_choice(make_frame(questionnaire=bare_model), "affirm") == "high"
    assert implied_choice(make_frame(questionnaire=bare_model), "deny") == "high"
    assert implied_choice(make_frame(questionnaire=bare_model, implied_choice_for_affirm="mid"), "affirm") == "mid"
    assert implied_choice(make_frame(implied_choice_for_affirm="sometimes"), "affirm") == "often"


@pytest.mark.unit
def test_explicit_answer_uses_low_confidence_as_risk(builtins, make_frame):
    frame = make_frame(ExplicitChoiceEvent(choice_id="sometimes", question_ref="headache", low_confidence=True), _asking())

    _handler(builtins, "direct_answer_explicit").apply(frame)

    assert frame.state.answers.get("headache") == Answer("sometimes", True)
    # The ask for cough is still outstanding
    assert frame.state.focus == FocusState("cough", "AskQuestion")


@pytest.mark.unit
def test_confirmation_affirmed_clears_risk(builtins, make_frame):
    frame = make_frame(YES, _confirming())

    _handler(builtins, "confirmation_affirmed").apply(frame)

    assert frame.state.answers.get("cough") == Answer("often", False)
    assert frame.state.focus == FocusState("cough", None)
    assert frame.acts == [AnswerConfirmedAct(control_id="healthScreen", question_id="cough", choice_id="often")]


@pytest.mark.unit
def test_confirmation_disconfirmed_removes_answer_and_reasks(builtins, make_frame):
    frame = make_frame(NO, _confirming())

    _handler(builtins, "confirmation_disconfirmed").apply(frame)

    assert "cough" not in frame.state.answers
    assert [a.name for a in frame.acts] == ["AnswerDisconfirmed", "AskQuestion"]
    assert isinstance(frame.acts[0], AnswerDisconfirmedAct)
    assert frame.acts[1].question_id == "cough"
    assert frame.state.focus == FocusState("cough", "AskQuestion")


@pytest.mark.unit
def test_focus_request_asks_referenced_question(builtins, make_frame):
    frame = make_frame(GeneralReferenceEvent(target_tag="headache"), _asking("cough"))

    _handler(builtins, "focus_question").apply(frame)

    act = frame.initiative_act
    assert isinstance(act, AskQuestionAct)
    assert act.question_id == "headache"
    assert frame.state.focus == FocusState("headache", "AskQuestion")


@pytest.mark.unit
def test_ask_question_guard(builtins, make_frame):
    ask = builtins.initiative_handlers()[0]
    answered = QuestionnaireState()
    answered.answers.record("cough", Answer("often"))
    answered.answers.record("headache", Answer("never"))

    assert ask.can_initiate(make_frame())
    assert not ask.can_initiate(make_frame(required=False))
    assert not ask.can_initiate(make_frame(state=answered.copy()))
    assert not ask.can_initiate(make_frame(questionnaire=QuestionnaireModel()))


@pytest.mark.unit
def test_ask_question_carries_answers_snapshot(builtins, make_frame):
    state = QuestionnaireState()
    state.answers.record("cough", Answer("often"))
    frame = make_frame(state=state)

    builtins.initiative_handlers()[0].apply(frame)

    act = frame.initiative_act
    assert isinstance(act, AskQuestionAct)
    assert act.question_id == "headache"
    assert act.answers == {"cough": Answer("often")}
    assert act.questionnaire is frame.model
    assert act.payload()["questionnaire"]["impliedChoiceForAffirm"] == "often"


@pytest.mark.unit
def test_implied_deny_handler_is_opt_in(builtins, make_frame):
    handler = implied_deny_handler()
    frame = make_frame(NO, _asking())

    assert handler.name == "direct_answer_implied_deny"
    assert handler.name not in [h.name for h in builtins.turn_handlers()]
    assert handler.can_handle(frame)

    handler.apply(frame)

    assert frame.state.answers.get("cough") == Answer("never", False)
    assert not handler.can_handle(make_frame(YES, _asking()))


@pytest.mark.unit
def test_pending_confirmation_is_repeated_instead_of_asking(builtins, make_frame):
    ask, confirm = builtins.initiative_handlers()
    frame = make_frame(state=_confirming(), answer_confirmation_required=True)

    assert confirm.can_initiate(frame)
    assert not ask.can_initiate(frame)

    confirm.apply(frame)

    act = frame.initiative_act
    assert isinstance(act, ConfirmAnswerAct)
    assert (act.question_id, act.choice_id) == ("cough", "often")
    assert frame.state.focus == FocusState("cough", "ConfirmAnswer")


@pytest.mark.unit
def test_confirmation_not_repeated_once_risk_is_gone(builtins, make_frame):
    confirm = builtins.initiative_handlers()[1]
    settled = QuestionnaireState(focus=FocusState("cough", "ConfirmAnswer"))
    settled.answers.record("cough", Answer("often", False))

    assert not confirm.can_initiate(make_frame(state=settled, answer_confirmation_required=True))
    assert not confirm.can_initiate(make_frame(state=_confirming()))


@pytest.mark.unit
@pytest.mark.parametrize(
    "name,event,state",
    [
        ("focus_question", LaunchEvent(), QuestionnaireState()),
        ("direct_answer_explicit", YES, _asking()),
        ("confirmation_affirmed", YES, _asking()),
        ("confirmation_disconfirmed", NO, _asking()),
        ("direct_answer_implied", YES, QuestionnaireState()),
    ],
)
def test_effect_without_matching_guard_raises(builtins, make_frame, name, event, state):
    frame = make_frame(event, state.copy())

    with pytest.raises(InconsistentInvocationOrderError):
        _handler(builtins, name).apply(frame)
