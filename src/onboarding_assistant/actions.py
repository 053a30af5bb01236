"""Inline action markers in assistant replies.

The assistant can embed directives for the widget in its reply text:

    [[highlight: <elementId> | <description>]]
    [[navigate: <route>]]

``parse_actions`` turns each well-formed marker into an ``AssistantAction``
and removes exactly that span from the text. Malformed markers produce no
action and stay in the text as written.
"""

from __future__ import annotations

from .schemas import AssistantAction

HIGHLIGHT_OPEN = "[[highlight:"
NAVIGATE_OPEN = "[[navigate:"
MARKER_OPEN = "[["
MARKER_CLOSE = "]]"

_OPENERS = (HIGHLIGHT_OPEN, NAVIGATE_OPEN)


def _next_opener(text: str, start: int) -> tuple[int, str | None]:
    """Find the earliest marker opener at or after ``start``."""
    best_index = -1
    best_opener: str | None = None
    for opener in _OPENERS:
        index = text.find(opener, start)
        if index != -1 and (best_index == -1 or index < best_index):
            best_index, best_opener = index, opener
    return best_index, best_opener


def _build_action(opener: str, body: str) -> AssistantAction | None:
    if opener == HIGHLIGHT_OPEN:
        element_id, separator, description = body.partition("|")
        element_id = element_id.strip()
        description = description.strip()
        if not separator or not element_id or not description:
            return None
        return AssistantAction(type="highlight", element_id=element_id, description=description)

    route = body.strip()
    if not route:
        return None
    return AssistantAction(type="navigate", route=route)


def parse_actions(text: str) -> tuple[str, list[AssistantAction]]:
    """
    Extract action markers from ``text``.

    Markers are scanned left to right and never overlap. An opener without
    a closing ``]]`` ends the scan; an opener whose body contains another
    ``[[`` is treated as unterminated and scanning resumes at the inner
    opener.

    Returns:
        Tuple of (text with recognised markers removed, actions in order).
    """
    actions: list[AssistantAction] = []
    kept: list[str] = []
    copied_to = 0
    scan_from = 0

    while True:
        start, opener = _next_opener(text, scan_from)
        if opener is None:
            break

        body_start = start + len(opener)
        end = text.find(MARKER_CLOSE, body_start)
        if end == -1:
            break

        body = text[body_start:end]
        nested = body.find(MARKER_OPEN)
        if nested != -1:
            scan_from = body_start + nested
            continue

        action = _build_action(opener, body)
        if action is None:
            scan_from = end + len(MARKER_CLOSE)
            continue

        actions.append(action)
        kept.append(text[copied_to:start])
        copied_to = end + len(MARKER_CLOSE)
        scan_from = copied_to

    kept.append(text[copied_to:])
    return "".join(kept), actions
