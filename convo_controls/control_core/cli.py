#!/usr/bin/env python
"""
Questionnaire demo CLI - Interactive testing tool for the questionnaire control
Usage: questionnaire-demo [--confirm] [--with-deny] [--log-level DEBUG]

Keywords stand in for a real language-understanding service:
  yes / no               bare affirm / deny
  go to <question>       bring a question into focus
  <choice> [for <q>]     explicit answer, e.g. "often for headache"
  <choice>?              explicit answer with low confidence
  start / reset / quit
"""

from __future__ import annotations

import argparse
import logging

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from ..core.logging import setup_logging
from ..settings import get_settings, is_development_mode
from .acts import AnswerConfirmedAct, AnswerDisconfirmedAct, AskQuestionAct, ConfirmAnswerAct, SystemAct
from .builtins import implied_deny_handler
from .config_types import QuestionnaireControlConfig
from .control import QuestionnaireControl
from .errors import ControlError, UnhandledInputError
from .ir import (
    Choice,
    ExplicitChoiceEvent,
    GeneralReferenceEvent,
    InputEvent,
    LaunchEvent,
    Question,
    QuestionnaireModel,
)
from .state import QuestionnaireState

console = Console()
logger = logging.getLogger(__name__)

AFFIRM_WORDS = {"yes", "y", "yeah", "yep", "sure"}
DENY_WORDS = {"no", "n", "nope", "nah"}
QUIT_WORDS = {"quit", "exit", "q"}


def health_screen_model() -> QuestionnaireModel:
    """Two symptom questions sharing a frequency scale."""
    return QuestionnaireModel(
        questions=[
            Question(id="cough", text="Do you have a cough?", target_tags=frozenset({"builtin_it", "cough"})),
            Question(id="headache", text="Do you have a headache?", target_tags=frozenset({"builtin_it", "headache"})),
        ],
        choices=[
            Choice(id="never", text="never"),
            Choice(id="sometimes", text="sometimes"),
            Choice(id="often", text="often"),
        ],
        implied_choice_for_affirm="often",
        implied_choice_for_deny="never",
    )


def map_input(text: str, model: QuestionnaireModel) -> InputEvent | None:
    """Keyword mapping from a typed line to a structured event; None if nothing matched."""
    words = text.strip().lower().split()
    if not words:
        return None
    if words == ["start"]:
        return LaunchEvent()
    if words[0] in AFFIRM_WORDS | DENY_WORDS:
        polarity = "affirm" if words[0] in AFFIRM_WORDS else "deny"
        target = words[-1] if len(words) > 1 and words[-1] in model.question_ids else None
        return GeneralReferenceEvent(polarity=polarity, target_tag=target)
    if words[:2] == ["go", "to"] and len(words) == 3:
        return GeneralReferenceEvent(target_tag=words[2])

    low_confidence = words[0].endswith("?")
    choice_id = words[0].rstrip("?")
    if not model.has_choice(choice_id):
        return None
    question_ref = None
    if len(words) == 3 and words[1] == "for":
        question_ref = words[2]
    return ExplicitChoiceEvent(choice_id=choice_id, question_ref=question_ref, low_confidence=low_confidence)


def render_act(act: SystemAct, model: QuestionnaireModel) -> str:
    """Plain-text prompt for one act."""
    if isinstance(act, AskQuestionAct):
        question = model.require_question(act.question_id)
        options = ", ".join(c.text or c.id for c in model.choices)
        return f"{question.text or question.id} ({options})"
    if isinstance(act, ConfirmAnswerAct):
        return f"Did you say '{act.choice_id}' for {act.question_id}?"
    if isinstance(act, AnswerConfirmedAct):
        return "Great, thanks for confirming."
    if isinstance(act, AnswerDisconfirmedAct):
        return f"My mistake, I've removed '{act.choice_id}' for {act.question_id}."
    return act.name


class QuestionnaireDemo:
    def __init__(self, confirm: bool = False, with_deny: bool = False, show_answers: bool = False):
        self.model = health_screen_model()
        self.control = QuestionnaireControl(
            QuestionnaireControlConfig(
                id="healthScreen",
                questionnaire=self.model,
                answer_confirmation_required=confirm,
                custom_handlers=[implied_deny_handler()] if with_deny else [],
            )
        )
        self.state = self.control.create_state()
        self.show_answers = show_answers or is_development_mode()

    def show_state(self, state: QuestionnaireState) -> None:
        table = Table(title="Answers", show_header=True, header_style="bold magenta")
        table.add_column("Question", style="cyan", width=12)
        table.add_column("Choice", style="white")
        table.add_column("At risk", style="yellow")
        for question in self.model.questions:
            answer = state.answers.get(question.id)
            table.add_row(
                question.id,
                answer.choice_id if answer else "-",
                str(answer.at_risk_of_misunderstanding) if answer else "-",
            )
        console.print(table)
        console.print(f"[dim]state: {self.control.describe_state(state) or 'idle'}[/dim]")

    def run_turn(self, event: InputEvent) -> None:
        try:
            result = self.control.process_turn(event, self.state)
        except UnhandledInputError:
            console.print("[yellow]Sorry, I didn't get that.[/yellow]")
            return
        self.state = result.state
        for act in result.acts:
            console.print(f"[bold green]Bot:[/bold green] {render_act(act, self.model)}")
        if not result.has_initiative_act and self.control.is_ready(self.state):
            console.print("[bold green]Bot:[/bold green] That's everything, thank you!")
        if self.show_answers:
            self.show_state(self.state)

    def interactive_mode(self) -> None:
        console.print(
            Panel(
                "[bold]Health screen questionnaire[/bold]\n\n"
                "yes / no, go to <question>, <choice> [for <question>], <choice>?, reset, quit",
                title="Questionnaire Demo",
                border_style="cyan",
            )
        )
        self.run_turn(LaunchEvent())

        while True:
            try:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
                command = user_input.strip().lower()

                if command in QUIT_WORDS:
                    console.print("[yellow]Goodbye! 👋[/yellow]")
                    break
                if command == "reset":
                    self.state = self.control.clear()
                    self.run_turn(LaunchEvent())
                    continue

                event = map_input(user_input, self.model)
                if event is None:
                    console.print("[yellow]Sorry, I didn't get that.[/yellow]")
                    continue
                self.run_turn(event)

            except KeyboardInterrupt:
                console.print("\n[yellow]Use 'quit' to exit[/yellow]")
            except ControlError as e:
                logger.error(f"Control error: {e}")
                console.print(f"[red]Error: {e}[/red]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interactive questionnaire control demo")
    parser.add_argument("--confirm", action="store_true", help="Confirm low-confidence answers")
    parser.add_argument("--with-deny", action="store_true", help="Map a bare 'no' to the implied deny choice")
    parser.add_argument("--show-answers", action="store_true", help="Print the answer table after each turn")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def run_cli(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level or get_settings().log_level)
    demo = QuestionnaireDemo(confirm=args.confirm, with_deny=args.with_deny, show_answers=args.show_answers)
    demo.interactive_mode()


if __name__ == "__main__":
    run_cli()
