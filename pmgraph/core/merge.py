"""
Markdown merge strategies for document updates.

Two strategies exist:

- append: the incoming text becomes a new trailing block.
- upsert: the first ``## <key>`` header of the incoming text selects a
  section of the current content; that section is replaced wholesale.
  Headers are compared as literal text (case-sensitive, trimmed), so
  ``## Q1`` and ``## Q1:`` are different keys. A missing header or an
  unknown key falls back to append.

These functions are pure; versioning and persistence live in
``pmgraph.services.document_engine``.
"""

import re

from pmgraph.models.document import UpdateMode

_UPSERT_KEY = re.compile(r"^##[ \t]+(.+)$", re.MULTILINE)


def apply_append(existing: str, incoming: str) -> str:
    """
    Append incoming content as a new block.

    Args:
        existing: Current document content
        incoming: Content to add

    Returns:
        ``existing`` without trailing whitespace, a blank line, the trimmed
        incoming content and a final newline
    """
    return existing.rstrip() + "\n\n" + incoming.strip() + "\n"


def extract_upsert_key(content: str) -> str | None:
    """
    Get the text of the first second-level header.

    Args:
        content: Incoming markdown

    Returns:
        Header text without the ``## `` marker, or None
    """
    match = _UPSERT_KEY.search(content)
    if not match:
        return None
    key = match.group(1).strip()
    return key or None


def build_section_pattern(key: str) -> re.Pattern[str]:
    """
    Pattern for the section headed ``## <key>``.

    The section starts at a line-start header whose text is exactly ``key``
    and runs up to the next ``## `` header or the end of the content.
    Lines may end in CRLF.
    """
    escaped = re.escape(key)
    return re.compile(
        rf"^##[ \t]+{escaped}[ \t\r]*$[\s\S]*?(?=\r?\n##\s|\Z)",
        re.MULTILINE,
    )


def apply_upsert(existing: str, incoming: str) -> str:
    """
    Replace the section keyed by the incoming header, or append.

    Args:
        existing: Current document content
        incoming: Content whose first ``##`` header is the key

    Returns:
        Merged content
    """
    key = extract_upsert_key(incoming)
    if key is None:
        return apply_append(existing, incoming)

    pattern = build_section_pattern(key)
    if not pattern.search(existing):
        return apply_append(existing, incoming)

    replacement = incoming.strip()
    # callable replacement: incoming text is literal, not a template
    return pattern.sub(lambda _: replacement, existing, count=1)


def merge_document(existing: str, incoming: str, mode: UpdateMode) -> str:
    """
    Merge incoming content into existing content.

    Args:
        existing: Current document content
        incoming: New content
        mode: Merge strategy

    Returns:
        New document content
    """
    if UpdateMode(mode) == UpdateMode.UPSERT:
        return apply_upsert(existing, incoming)
    return apply_append(existing, incoming)
