"""Deterministic keyword classification used when no model is available.

Categories are tested in precedence order (action, decision, question,
announcement) against the message text followed by its thread lines; the first
match wins and anything unmatched is FYI. Patterns cover Dutch and English
phrasing.
"""

from __future__ import annotations

import re
import typing as typ

import msgspec

from slackdigest.models import Category, Priority, truncate_summary

from .models import Classification

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import ClassificationRequest


class RuleSet(msgspec.Struct, kw_only=True, frozen=True):
    """Configurable keyword patterns for rule-based classification.

    Attributes
    ----------
    action_patterns
        Phrases that mark a request or task.
    decision_patterns
        Phrases that mark a decision taken.
    question_patterns
        Trailing question marks and interrogative phrases.
    announcement_patterns
        Phrases that introduce news or a heads-up.
    urgency_patterns
        Markers that raise an action item to high priority.
    mention_pattern
        Pattern whose first group captures a mentioned user id.

    """

    action_patterns: tuple[str, ...] = (
        r"\b(todo|task|actie|graag|kun je|kan je|moet|deadline)\b",
        r"\bvoor\s+\w+dag\b",
        r"\b(can you|could you|please|need to|action item)\b",
        r"\b(dringend|asap|urgent)\b",
    )
    decision_patterns: tuple[str, ...] = (
        r"\b(besloten|besluit|akkoord|goedgekeurd|we gaan)\b",
        r"\b(approved|decided|decision|agreed|we will go with)\b",
    )
    question_patterns: tuple[str, ...] = (
        r"\?\s*$",
        r"\b(vraag|weet iemand|heeft iemand|wie kan)\b",
        r"\b(question|does anyone|anyone know|who can)\b",
    )
    announcement_patterns: tuple[str, ...] = (
        r"\b(heads up|fyi|mededeling|let op|nieuws)\b",
        r"\b(announcement|update|release|launched)\b",
    )
    urgency_patterns: tuple[str, ...] = (r"\b(dringend|asap|urgent|vandaag|today)\b",)
    mention_pattern: str = r"<@(\w+)>"


DEFAULT_RULE_SET = RuleSet()


def _compile(patterns: tuple[str, ...]) -> tuple[re.Pattern[str], ...]:
    # No MULTILINE: a trailing question mark must end the whole text.
    flags = re.IGNORECASE
    return tuple(re.compile(pattern, flags) for pattern in patterns)


def _matches(text: str, patterns: tuple[re.Pattern[str], ...]) -> bool:
    return any(pattern.search(text) for pattern in patterns)


_CATEGORY_PRIORITY: dict[Category, Priority] = {
    Category.ACTION_ITEM: Priority.MEDIUM,
    Category.DECISION: Priority.MEDIUM,
    Category.QUESTION: Priority.MEDIUM,
    Category.ANNOUNCEMENT: Priority.LOW,
    Category.FYI: Priority.LOW,
}


class RuleBasedClassifier:
    """Keyword classifier implementing :class:`ClassificationStrategy`.

    Examples
    --------
    >>> from slackdigest.classify.models import ClassificationRequest
    >>> request = ClassificationRequest(
    ...     id="1", channel="general", user="Jane", text="Kun je dit vandaag fixen?"
    ... )
    >>> RuleBasedClassifier().classify(request).priority
    <Priority.HIGH: 'high'>

    """

    name = "rules"

    def __init__(self, rule_set: RuleSet = DEFAULT_RULE_SET) -> None:
        """Compile the patterns of ``rule_set``."""
        self._rule_set = rule_set
        self._ordered: tuple[tuple[Category, tuple[re.Pattern[str], ...]], ...] = (
            (Category.ACTION_ITEM, _compile(rule_set.action_patterns)),
            (Category.DECISION, _compile(rule_set.decision_patterns)),
            (Category.QUESTION, _compile(rule_set.question_patterns)),
            (Category.ANNOUNCEMENT, _compile(rule_set.announcement_patterns)),
        )
        self._urgency = _compile(rule_set.urgency_patterns)
        self._mention = re.compile(rule_set.mention_pattern)

    async def classify_batch(
        self,
        requests: cabc.Sequence[ClassificationRequest],
    ) -> list[Classification]:
        """Classify every request; never raises for well-formed input."""
        return [self.classify(request) for request in requests]

    def classify(self, request: ClassificationRequest) -> Classification:
        """Classify a single request."""
        text = request.text
        if request.thread:
            text = f"{text}\n{request.thread}"

        category = self._categorize(text)
        priority = _CATEGORY_PRIORITY[category]
        if category is Category.ACTION_ITEM and _matches(text, self._urgency):
            priority = Priority.HIGH

        mention = self._mention.search(text)
        return Classification(
            id=request.id,
            category=category,
            summary=truncate_summary(request.text),
            priority=priority,
            assignee=mention.group(1) if mention else None,
            deadline=None,
        )

    def _categorize(self, text: str) -> Category:
        for category, patterns in self._ordered:
            if _matches(text, patterns):
                return category
        return Category.FYI
