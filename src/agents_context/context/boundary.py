"""Retention boundary computation.

The retained tail starts ``keep`` messages from the end and grows backward
whenever it holds a tool result whose issuing assistant message would
otherwise be dropped, so a call and its result are never separated.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

from agents_context.context.estimator import get_issued_call_ids, get_tool_call_id


def _find_issuer(messages: Sequence[Any], result_index: int, call_id: str) -> Optional[int]:
    """Index of the nearest earlier message that issued ``call_id``."""
    for i in range(result_index - 1, -1, -1):
        if call_id in get_issued_call_ids(messages[i]):
            return i
    return None


def find_retention_start(messages: Sequence[Any], keep: int) -> int:
    """Compute where the retained tail begins.

    Args:
        messages: Pre-compaction history.
        keep: Requested number of messages to retain.

    Returns:
        Index of the first retained message. Zero means nothing is
        droppable.
    """
    total = len(messages)
    if keep >= total:
        return 0
    start = max(0, total - keep)

    changed = True
    while changed and start > 0:
        changed = False
        for i in range(start, total):
            call_id = get_tool_call_id(messages[i])
            if not call_id:
                continue
            issuer = _find_issuer(messages, i, call_id)
            if issuer is not None and issuer < start:
                start = issuer
                changed = True
                break

    return start


def split_for_compaction(
    messages: Sequence[Any], keep: int
) -> Tuple[List[Any], List[Any]]:
    """Split history into the droppable prefix and the retained tail.

    Args:
        messages: Pre-compaction history.
        keep: Requested number of messages to retain.

    Returns:
        Tuple of (droppable, retained). The droppable list is empty when
        the tail would have to cover the whole history.
    """
    start = find_retention_start(messages, keep)
    return list(messages[:start]), list(messages[start:])
