"""Tests for grouping terminals into split groups."""

import pytest

from term_layouts.models import TerminalGroup, TerminalSpec
from term_layouts.partitioner import (
    GroupingStrategy,
    GroupPartitioner,
    group_separately,
    group_together,
    groups_from_partition,
)
from term_layouts.prompts import CANCELLED
from term_layouts.testing import ScriptedPrompter

SEPARATE = "Each terminal separate"
TOGETHER = "All split side by side"
MANUAL = "Organize splits manually"
ADD_GROUP = "Add another group"
FINISH = "Finish (one group each for the rest)"
INDIVIDUAL = "Create individual groups for the rest"
CANCEL = "Cancel"


def specs(*names: str) -> list[TerminalSpec]:
    return [TerminalSpec(name=name) for name in names]


def names(groups: list[TerminalGroup]) -> list[list[str]]:
    return [[spec.name for spec in group.terminals] for group in groups]


class TestPartitionHelpers:
    """Test the non-interactive helpers."""

    def test_separately(self):
        a, b, c = specs("A", "B", "C")
        assert group_separately([a, b, c]) == [
            TerminalGroup(id=0, terminals=[a]),
            TerminalGroup(id=1, terminals=[b]),
            TerminalGroup(id=2, terminals=[c]),
        ]

    def test_together(self):
        a, b, c = specs("A", "B", "C")
        assert group_together([a, b, c]) == [TerminalGroup(id=0, terminals=[a, b, c])]

    def test_empty_parts_skipped(self):
        a, b = specs("A", "B")
        groups = groups_from_partition([[a], [], [b]])
        assert [group.id for group in groups] == [0, 1]


class TestPartition:
    """Test strategy selection."""

    @pytest.mark.asyncio
    async def test_no_specs_returns_empty_list(self):
        prompter = ScriptedPrompter()
        assert await GroupPartitioner(prompter).partition([]) == []
        assert prompter.prompts == []

    @pytest.mark.asyncio
    async def test_single_spec_skips_prompt(self):
        prompter = ScriptedPrompter()
        (a,) = specs("A")
        groups = await GroupPartitioner(prompter).partition([a])
        assert groups == [TerminalGroup(id=0, terminals=[a])]
        assert prompter.prompts == []

    @pytest.mark.asyncio
    async def test_separate(self):
        groups = await GroupPartitioner(ScriptedPrompter([SEPARATE])).partition(specs("A", "B", "C"))
        assert names(groups) == [["A"], ["B"], ["C"]]
        assert [group.id for group in groups] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_together(self):
        groups = await GroupPartitioner(ScriptedPrompter([TOGETHER])).partition(specs("A", "B", "C"))
        assert names(groups) == [["A", "B", "C"]]

    @pytest.mark.asyncio
    async def test_strategy_argument_skips_prompt(self):
        prompter = ScriptedPrompter()
        groups = await GroupPartitioner(prompter).partition(
            specs("A", "B"), strategy=GroupingStrategy.TOGETHER
        )
        assert names(groups) == [["A", "B"]]
        assert prompter.prompts == []

    @pytest.mark.asyncio
    async def test_cancel_strategy(self):
        result = await GroupPartitioner(ScriptedPrompter([CANCELLED])).partition(specs("A", "B"))
        assert result is CANCELLED


class TestManualPartition:
    """Test operator-driven grouping."""

    @pytest.mark.asyncio
    async def test_selection_then_finish(self):
        prompter = ScriptedPrompter([MANUAL, ["B", "D"], FINISH])
        groups = await GroupPartitioner(prompter).partition(specs("A", "B", "C", "D"))
        assert names(groups) == [["B", "D"], ["A"], ["C"]]
        assert [group.id for group in groups] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_notifies_before_selecting(self):
        prompter = ScriptedPrompter([MANUAL, ["A", "B"]])
        await GroupPartitioner(prompter).partition(specs("A", "B"))
        assert len(prompter.notifications) == 1

    @pytest.mark.asyncio
    async def test_pool_shrinks_between_groups(self):
        prompter = ScriptedPrompter([MANUAL, ["C"], ADD_GROUP, ["A", "B"]])
        groups = await GroupPartitioner(prompter).partition(specs("A", "B", "C"))
        assert names(groups) == [["C"], ["A", "B"]]
        # Strategy, first pick, continue prompt, second pick
        assert prompter.choices_shown[1] == ["A", "B", "C"]
        assert prompter.choices_shown[3] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_group_order_follows_selection(self):
        prompter = ScriptedPrompter([MANUAL, ["C", "A"], FINISH])
        groups = await GroupPartitioner(prompter).partition(specs("A", "B", "C"))
        assert names(groups) == [["C", "A"], ["B"]]

    @pytest.mark.asyncio
    async def test_empty_selection_then_cancel(self):
        prompter = ScriptedPrompter([MANUAL, [], CANCEL])
        result = await GroupPartitioner(prompter).partition(specs("A", "B", "C"))
        assert result is CANCELLED

    @pytest.mark.asyncio
    async def test_empty_selection_then_individual(self):
        prompter = ScriptedPrompter([MANUAL, ["A"], ADD_GROUP, [], INDIVIDUAL])
        groups = await GroupPartitioner(prompter).partition(specs("A", "B", "C"))
        assert names(groups) == [["A"], ["B"], ["C"]]

    @pytest.mark.asyncio
    async def test_dismissed_selection_counts_as_empty(self):
        prompter = ScriptedPrompter([MANUAL, CANCELLED, INDIVIDUAL])
        groups = await GroupPartitioner(prompter).partition(specs("A", "B"))
        assert names(groups) == [["A"], ["B"]]

    @pytest.mark.asyncio
    async def test_dismissed_remainder_prompt_cancels(self):
        prompter = ScriptedPrompter([MANUAL, [], CANCELLED])
        result = await GroupPartitioner(prompter).partition(specs("A", "B"))
        assert result is CANCELLED

    @pytest.mark.asyncio
    async def test_dismissed_continue_prompt_finishes(self):
        prompter = ScriptedPrompter([MANUAL, ["B"], CANCELLED])
        groups = await GroupPartitioner(prompter).partition(specs("A", "B", "C"))
        assert names(groups) == [["B"], ["A"], ["C"]]

    @pytest.mark.asyncio
    async def test_duplicate_names_matched_by_identity(self):
        first, second = TerminalSpec(name="zsh"), TerminalSpec(name="zsh")
        partitioner = GroupPartitioner(ScriptedPrompter())

        class PickSecond(ScriptedPrompter):
            async def choose_many(self, prompt, choices, *, title=""):
                self.prompts.append(("choose_many", prompt))
                return [choices[1].value]

        partitioner.prompter = PickSecond([FINISH])
        groups = await partitioner.partition_manually([first, second])
        assert groups[0].terminals[0] is second
        assert groups[1].terminals[0] is first
