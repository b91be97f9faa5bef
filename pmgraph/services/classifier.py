"""
Rule-based routing of conversation summaries to document updates.

Each rule is a set of trigger phrases; any phrase present in the
lower-cased summary fires the rule. Rules are independent, so one summary
can update several documents. When nothing fires, the summary lands in
the notes document.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime

from pmgraph.models.document import DocType, UpdateMode


@dataclass(frozen=True)
class ClassifiedUpdate:
    """A merge synthesized from a conversation summary."""

    doc_type: DocType
    mode: UpdateMode
    content: str


@dataclass(frozen=True)
class ClassificationRule:
    doc_type: DocType
    mode: UpdateMode
    triggers: tuple[str, ...]
    template: str
    excerpt: int

    def matches(self, lowered: str) -> bool:
        return any(trigger in lowered for trigger in self.triggers)

    def render(self, summary: str, today: str) -> str:
        # str.replace keeps braces inside the summary literal
        return self.template.replace("{date}", today).replace(
            "{summary}", summary[: self.excerpt]
        )


NOTES_TEMPLATE = "## {date}\n{summary}"

RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        DocType.TODO,
        UpdateMode.APPEND,
        ("todo", "task", "need to", "should"),
        "## {date}\n- [ ] {summary}",
        200,
    ),
    ClassificationRule(
        DocType.PROGRESS,
        UpdateMode.UPSERT,
        ("implemented", "completed", "fixed", "added"),
        "## Current Sprint\n**Status:** In progress\n**Last update:** {date}\n\n{summary}",
        300,
    ),
    ClassificationRule(
        DocType.MEMORY,
        UpdateMode.APPEND,
        ("decided", "learned", "discovered", "architecture"),
        "## {date} - Session Notes\n{summary}",
        300,
    ),
    ClassificationRule(
        DocType.DELAYS,
        UpdateMode.APPEND,
        ("delay", "blocked", "issue", "problem"),
        "## {date}\n**Reason:** {summary}\n**Impact:** TBD\n**Mitigation:** TBD",
        200,
    ),
    ClassificationRule(
        DocType.NOTES,
        UpdateMode.APPEND,
        ("question", "how to", "?"),
        NOTES_TEMPLATE,
        300,
    ),
)

FALLBACK_RULE = ClassificationRule(DocType.NOTES, UpdateMode.APPEND, (), NOTES_TEMPLATE, 300)


def classify_updates(summary: str, today: date | None = None) -> list[ClassifiedUpdate]:
    """
    Turn a conversation summary into document updates.

    Args:
        summary: Conversation summary
        today: Date stamped into headers (defaults to today, UTC)

    Returns:
        One update per matching rule, or a single notes append
    """
    stamp = (today or datetime.now(UTC).date()).isoformat()
    lowered = summary.lower()

    fired = [rule for rule in RULES if rule.matches(lowered)] or [FALLBACK_RULE]
    return [
        ClassifiedUpdate(rule.doc_type, rule.mode, rule.render(summary, stamp)) for rule in fired
    ]
