"""
Tests du résolveur d'entrées (arguments, questions, valeurs par défaut).
"""

import re

from keygen_utils import DEFAULT_ALGORITHM, DEFAULT_USER_IDENTIFIER
from resolve_inputs import ask_with_default, resolve_inputs


class ScriptedInput:
    """Remplace input() : renvoie les réponses prévues et garde les questions posées."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


def no_prompt(prompt):
    raise AssertionError(f"question inattendue : {prompt!r}")


def test_arguments_are_used_verbatim_without_prompting():
    inputs = resolve_inputs(("alice@example.com", "abc", "rsa"), read_line=no_prompt)

    assert inputs.user_identifier == "alice@example.com"
    assert inputs.unique_identifier == "abc"
    assert inputs.algorithm == "rsa"


def test_unrecognized_algorithm_argument_is_kept_as_is():
    inputs = resolve_inputs(("alice@example.com", "abc", "dsa"), read_line=no_prompt)

    assert inputs.algorithm == "dsa"


def test_empty_answers_use_defaults():
    scripted = ScriptedInput("", "", "")

    inputs = resolve_inputs((), read_line=scripted)

    assert inputs.user_identifier == DEFAULT_USER_IDENTIFIER
    assert re.fullmatch(r"[0-9a-f]{32}", inputs.unique_identifier)
    assert inputs.algorithm == DEFAULT_ALGORITHM
    assert len(scripted.prompts) == 3


def test_answers_override_defaults():
    scripted = ScriptedInput("bob@example.com", "run-42", "rsa")

    inputs = resolve_inputs((None, None, None), read_line=scripted)

    assert (inputs.user_identifier, inputs.unique_identifier, inputs.algorithm) == (
        "bob@example.com", "run-42", "rsa",
    )


def test_only_missing_inputs_are_asked_in_order():
    scripted = ScriptedInput("", "rsa")

    inputs = resolve_inputs(("carol@example.com",), read_line=scripted)

    assert inputs.user_identifier == "carol@example.com"
    assert len(scripted.prompts) == 2
    assert "Identifiant unique" in scripted.prompts[0]
    assert "Algorithme" in scripted.prompts[1]
    assert inputs.algorithm == "rsa"


def test_prompt_shows_the_default():
    scripted = ScriptedInput("")

    ask_with_default("Algorithme", "ed25519", read_line=scripted)

    assert "[ed25519]" in scripted.prompts[0]


def test_end_of_input_counts_as_empty_line():
    assert ask_with_default("Algorithme", "ed25519", read_line=ScriptedInput()) == "ed25519"


def test_builtin_input_is_used_by_default(monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt: "dave@example.com")

    assert ask_with_default("Identifiant", DEFAULT_USER_IDENTIFIER) == "dave@example.com"


def test_generated_unique_identifiers_differ_between_runs():
    runs = 200
    values = {
        resolve_inputs(("alice@example.com",), read_line=ScriptedInput("", "")).unique_identifier
        for _ in range(runs)
    }

    assert len(values) == runs


def test_answers_are_used_verbatim():
    scripted = ScriptedInput("  bob@example.com ", "   ", "")

    inputs = resolve_inputs((), read_line=scripted)

    assert inputs.user_identifier == "  bob@example.com "
    assert inputs.unique_identifier == "   "
    assert inputs.algorithm == DEFAULT_ALGORITHM


def test_padded_answer_keeps_its_spaces():
    assert ask_with_default("Identifiant", "x", read_line=ScriptedInput("  x ")) == "  x "
