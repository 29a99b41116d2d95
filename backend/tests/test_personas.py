"""Tests for persona selection and prompt construction."""

import pytest

from app.services.personas import (
    STYLE_PROMPTS,
    build_user_prompt,
    get_persona,
    get_style_label,
)


@pytest.mark.parametrize("style", ["kind", "teacher", "devil"])
def test_known_styles_get_their_own_persona(style):
    assert get_persona(style) == STYLE_PROMPTS[style]


@pytest.mark.parametrize("style", ["unknown", "", "Devil", "KIND"])
def test_unknown_style_falls_back_to_teacher(style):
    assert get_persona(style) == get_persona("teacher")


def test_personas_are_distinct():
    assert len(set(STYLE_PROMPTS.values())) == 3


def test_style_labels():
    assert get_style_label("devil") == "Devil"
    assert get_style_label("nonsense") == "Teacher"


def test_prompt_embeds_topic_and_argument_verbatim():
    prompt = build_user_prompt("Remote work", "It boosts productivity")

    assert 'Topic: "Remote work"' in prompt
    assert 'User\'s argument: "It boosts productivity"' in prompt


def test_prompt_contains_reply_template():
    prompt = build_user_prompt("t", "m")

    for line in (
        "RESPONSE: [Your rebuttal]",
        "SCORES:",
        "Logical Consistency: x/5",
        "Persuasiveness: x/5",
        "Factual Accuracy: x/5",
        "Structural Coherence: x/5",
        "Rebuttal Resilience: x/5",
        "FEEDBACK:",
    ):
        assert line in prompt, f"Template line missing: {line}"


def test_prompt_survives_braces_in_user_text():
    prompt = build_user_prompt("{topic}", "use {message} and {0}")

    assert 'Topic: "{topic}"' in prompt
    assert 'User\'s argument: "use {message} and {0}"' in prompt
