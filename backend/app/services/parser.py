"""
Evaluation Parser.

WHAT THIS DOES:
Reads the model's free-text reply and pulls out the rubric scores,
the feedback line and the rebuttal text.

WHY BEST-EFFORT:
The model is asked to answer in this template:

    RESPONSE: <rebuttal>
    SCORES:
    Logical Consistency: x/5
    Persuasiveness: x/5
    Factual Accuracy: x/5
    Structural Coherence: x/5
    Rebuttal Resilience: x/5
    FEEDBACK: <one suggestion>

...but nothing guarantees it actually does. So nothing here raises:
- a category that isn't found scores 1
- a missing FEEDBACK line gives a placeholder
- a missing RESPONSE marker gives the whole text as the rebuttal

SCORE MATCHING:
- Category names are matched case-sensitively
- Order in the text doesn't matter
- If a category appears twice, the last one wins
- Digits outside 1-5 (e.g. "0/5", "7/5") are clamped into range

USAGE:
    evaluation = parse_evaluation(raw_text)
    evaluation.scores["Persuasiveness"]  # -> 4
    evaluation.feedback                  # -> "Be more concise"
"""

import re
from dataclasses import dataclass, field

CATEGORIES = (
    "Logical Consistency",
    "Persuasiveness",
    "Factual Accuracy",
    "Structural Coherence",
    "Rebuttal Resilience",
)

MIN_SCORE = 1
MAX_SCORE = 5
DEFAULT_FEEDBACK = "No feedback available."

SCORE_PATTERN = re.compile(
    r"(" + "|".join(re.escape(name) for name in CATEGORIES) + r"):\s*(\d)/5"
)
FEEDBACK_PATTERN = re.compile(r"FEEDBACK:\s*(.+)", re.DOTALL)
RESPONSE_PATTERN = re.compile(
    r"RESPONSE:\s*([\s\S]*?)(?:SCORES:|FEEDBACK:|$)", re.IGNORECASE
)


def _default_scores() -> dict[str, int]:
    return {name: MIN_SCORE for name in CATEGORIES}


@dataclass
class Evaluation:
    """Scores and feedback extracted from one model reply."""
    scores: dict[str, int] = field(default_factory=_default_scores)
    feedback: str = DEFAULT_FEEDBACK


def parse_scores(text: str) -> dict[str, int]:
    scores = _default_scores()
    for match in SCORE_PATTERN.finditer(text):
        value = int(match.group(2))
        scores[match.group(1)] = min(MAX_SCORE, max(MIN_SCORE, value))
    return scores


def parse_feedback(text: str) -> str:
    match = FEEDBACK_PATTERN.search(text)
    if not match:
        return DEFAULT_FEEDBACK
    return match.group(1).strip() or DEFAULT_FEEDBACK


def parse_evaluation(text: str | None) -> Evaluation:
    """Extract scores and feedback. Never raises."""
    text = text or ""
    return Evaluation(scores=parse_scores(text), feedback=parse_feedback(text))


def extract_rebuttal(text: str | None) -> str:
    """
    The rebuttal part of a reply: everything after RESPONSE: up to the
    SCORES: or FEEDBACK: marker. Falls back to the whole (trimmed) text.
    """
    text = text or ""
    match = RESPONSE_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()
