"""Dependency closure of a research item over its unmet prerequisites."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, TypeVar

if TYPE_CHECKING:
    from .queue_engine import QueueItem

ItemT = TypeVar("ItemT", bound="QueueItem")


def closure(item: ItemT) -> tuple[ItemT, ...]:
    """Return the unmet prerequisites of ``item`` followed by ``item`` itself.

    The result is in dependency order: every entry precedes the entries that
    depend on it. Satisfied prerequisites are neither included nor walked, and
    items reachable through several paths appear once.
    """

    seen: set[ItemT] = {item}
    ordered: list[ItemT] = []
    # Explicit stack of (node, remaining prerequisites) keeps deep chains off
    # the interpreter stack.
    stack: list[tuple[ItemT, Iterator[ItemT]]] = [(item, iter(item.prerequisites()))]

    while stack:
        node, prereqs = stack[-1]
        for prereq in prereqs:
            if prereq in seen or prereq.is_satisfied():
                continue
            seen.add(prereq)
            stack.append((prereq, iter(prereq.prerequisites())))
            break
        else:
            stack.pop()
            ordered.append(node)

    return tuple(ordered)


def missing_prerequisites(item: ItemT) -> tuple[ItemT, ...]:
    return closure(item)[:-1]


def unmet_prerequisites(item: ItemT) -> frozenset[ItemT]:
    return frozenset(missing_prerequisites(item))
