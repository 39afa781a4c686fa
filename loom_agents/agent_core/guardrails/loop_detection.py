from __future__ import annotations

"""Repeated tool-call detection.

A model that keeps issuing the same sequence of tool calls with the same
arguments is stuck. ``is_looping`` compares the most recent window of calls
with the window right before it.

Arguments are reduced to a deterministic string (``hash_args``) once, when the
call is recorded, so each check is ``O(window_size)``.
"""

import json
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

DEFAULT_WINDOW_SIZE = 3


@dataclass(frozen=True)
class ToolCallRecord:
    """Identity of one tool call for loop detection."""

    tool_name: str
    args_hash: str

    @classmethod
    def of(cls, tool_name: str, args: Mapping[str, Any]) -> "ToolCallRecord":
        return cls(tool_name=tool_name, args_hash=hash_args(args))


def hash_args(args: Mapping[str, Any]) -> str:
    """
    Serialize tool arguments deterministically.

    Keys are sorted so that argument order does not matter. When the arguments
    cannot be serialized as JSON the string form is used instead; two distinct
    unserializable objects with the same ``str`` collide and may be reported
    as a loop.
    """
    try:
        return json.dumps(args, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return str(args)


def is_looping(history: Sequence[ToolCallRecord], window_size: int = DEFAULT_WINDOW_SIZE) -> bool:
    """
    Judge whether the tail of ``history`` repeats.

    Args:
        history: Tool calls in call order.
        window_size: Length of the repeated sequence to look for.

    Returns:
        True iff the last ``window_size`` records equal, pairwise on tool name
        and argument hash, the ``window_size`` records immediately before them.
        False when fewer than ``2 * window_size`` records exist, which means
        "undecided" rather than "safe".

    Raises:
        ValueError: If ``window_size`` is smaller than 1.
    """
    if window_size < 1:
        raise ValueError("window_size must be >= 1")
    if len(history) < window_size * 2:
        return False

    recent = history[-window_size:]
    preceding = history[-window_size * 2 : -window_size]
    return all(
        cur.tool_name == prev.tool_name and cur.args_hash == prev.args_hash for cur, prev in zip(recent, preceding)
    )
