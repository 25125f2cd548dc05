"""Partitioning of terminal specs into split groups.

Which terminals sit side by side cannot be read back from the host once they
exist, so the operator states it here. The partitioner is host-independent;
replaying the groups is the replayer's job.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Sequence

from .models import TerminalGroup, TerminalSpec
from .prompts import CANCELLED, Cancelled, Choice, PromptSurface, is_cancelled

logger = logging.getLogger(__name__)


class GroupingStrategy(Enum):
    """How a list of terminals is split into groups."""

    SEPARATE = "separate"  # One group per terminal
    TOGETHER = "together"  # A single group with every terminal
    MANUAL = "manual"  # Operator picks each group


class _RemainderAction(Enum):
    INDIVIDUAL = "individual"
    CANCEL = "cancel"


class _ContinueAction(Enum):
    ADD_GROUP = "add_group"
    FINISH = "finish"


def groups_from_partition(parts: Iterable[Sequence[TerminalSpec]]) -> list[TerminalGroup]:
    """Number non-empty parts sequentially from 0, in the given order."""
    groups: list[TerminalGroup] = []
    for part in parts:
        if not part:
            continue
        groups.append(TerminalGroup(id=len(groups), terminals=list(part)))
    return groups


def group_separately(specs: Sequence[TerminalSpec]) -> list[TerminalGroup]:
    """Put every spec in its own group, preserving order."""
    return groups_from_partition([spec] for spec in specs)


def group_together(specs: Sequence[TerminalSpec]) -> list[TerminalGroup]:
    """Put every spec in one group, preserving order."""
    return groups_from_partition([specs])


def _describe(spec: TerminalSpec) -> str:
    return f"{spec.name}({spec.profile_name})" if spec.profile_name else spec.name


def _contains(items: Sequence[TerminalSpec], spec: TerminalSpec) -> bool:
    return any(item is spec for item in items)


class GroupPartitioner:
    """Turns an ordered list of terminal specs into ordered groups."""

    def __init__(self, prompter: PromptSurface) -> None:
        self.prompter = prompter

    async def partition(
        self,
        specs: Sequence[TerminalSpec],
        strategy: GroupingStrategy | None = None,
    ) -> list[TerminalGroup] | Cancelled:
        """Group ``specs``, asking for a strategy when none is given.

        Zero specs yield no groups and one spec yields a single group; neither
        case prompts.

        Returns:
            The groups, or CANCELLED if the operator aborted.
        """
        specs = list(specs)
        if not specs:
            return []
        if len(specs) == 1:
            return group_separately(specs)

        if strategy is None:
            chosen = await self._ask_strategy(specs)
            if is_cancelled(chosen):
                return CANCELLED
            strategy = chosen

        if strategy is GroupingStrategy.SEPARATE:
            groups = group_separately(specs)
        elif strategy is GroupingStrategy.TOGETHER:
            groups = group_together(specs)
        else:
            manual = await self.partition_manually(specs)
            if is_cancelled(manual):
                return CANCELLED
            groups = manual

        logger.debug(
            "Grouped %d terminals into %d groups (%s): %s",
            len(specs),
            len(groups),
            strategy.value,
            [[spec.name for spec in group.terminals] for group in groups],
        )
        return groups

    async def partition_manually(
        self,
        specs: Sequence[TerminalSpec],
    ) -> list[TerminalGroup] | Cancelled:
        """Let the operator pick groups one at a time.

        Picked terminals leave the pool (matched by identity). An empty pick
        offers to finish with one group per remaining terminal or to cancel.
        After each group the operator may stop, which also drains the pool
        into single-terminal groups in their original order.
        """
        pool = list(specs)
        parts: list[list[TerminalSpec]] = []

        self.prompter.notify(
            "Terminals in the same group are split side by side; "
            "different groups open separately"
        )

        while pool:
            group_number = len(parts) + 1
            created_info = f" | {len(parts)} group(s) created" if parts else ""
            selected = await self.prompter.choose_many(
                f"Group {group_number}: select the terminals to place side by side{created_info}",
                [
                    Choice(
                        label=spec.name,
                        value=spec,
                        description=" | ".join(
                            part for part in (spec.profile_name, spec.cwd or "captured terminal") if part
                        ),
                    )
                    for spec in pool
                ],
                title=f"{len(pool)} terminal(s) left to organize",
            )

            picked: list[TerminalSpec] = []
            if not is_cancelled(selected):
                for spec in selected:
                    if _contains(pool, spec) and not _contains(picked, spec):
                        picked.append(spec)

            if not picked:
                action = await self.prompter.choose(
                    f"{len(pool)} terminal(s) not grouped yet",
                    [
                        Choice("Create individual groups for the rest", _RemainderAction.INDIVIDUAL),
                        Choice("Cancel", _RemainderAction.CANCEL),
                    ],
                )
                if action is not _RemainderAction.INDIVIDUAL:
                    logger.debug("Manual grouping cancelled with %d terminals left", len(pool))
                    return CANCELLED
                parts.extend([spec] for spec in pool)
                break

            parts.append(picked)
            pool = [spec for spec in pool if not _contains(picked, spec)]

            if pool:
                action = await self.prompter.choose(
                    f"Group {group_number} created with {len(picked)} terminal(s). "
                    f"{len(pool)} left.",
                    [
                        Choice("Add another group", _ContinueAction.ADD_GROUP),
                        Choice("Finish (one group each for the rest)", _ContinueAction.FINISH),
                    ],
                )
                if action is not _ContinueAction.ADD_GROUP:
                    parts.extend([spec] for spec in pool)
                    break

        return groups_from_partition(parts)

    async def _ask_strategy(self, specs: Sequence[TerminalSpec]) -> GroupingStrategy | Cancelled:
        count = len(specs)
        return await self.prompter.choose(
            "Define how the terminals are split",
            [
                Choice(
                    label="Each terminal separate",
                    value=GroupingStrategy.SEPARATE,
                    description=f"{count} independent terminals",
                    detail="Recreates: " + " ".join(f"[{_describe(spec)}]" for spec in specs),
                ),
                Choice(
                    label="All split side by side",
                    value=GroupingStrategy.TOGETHER,
                    description=f"{count} terminals together",
                    detail="Recreates: [" + " | ".join(_describe(spec) for spec in specs) + "]",
                ),
                Choice(
                    label="Organize splits manually",
                    value=GroupingStrategy.MANUAL,
                    description="You choose which terminals sit side by side",
                    detail="Define which terminals are split together",
                ),
            ],
            title="Terminals: " + ", ".join(spec.name for spec in specs),
        )
