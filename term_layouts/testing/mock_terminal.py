"""Mock terminal host and prompter for testing.

Example usage in tests:
    from term_layouts.testing import MockTerminalHost, ScriptedPrompter

    async def test_apply():
        host = MockTerminalHost()
        replayer = LayoutReplayer(host, settings)
        await replayer.apply_layout(layout)
        assert [t.name for t in host.terminals] == ["api", "web"]

    async def test_partition():
        prompter = ScriptedPrompter(["All split side by side"])
        groups = await GroupPartitioner(prompter).partition(specs)
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence, TypeVar

from term_layouts.exceptions import TerminalSpawnError
from term_layouts.ports import CreateTerminalOptions, TerminalHandle
from term_layouts.prompts import CANCELLED, Cancelled, Choice, Severity, Validator

T = TypeVar("T")


@dataclass
class MockTerminal:
    """A terminal open in the mock host."""

    id: str
    name: str
    working_directory: str | None = None
    environment: dict[str, str] = field(default_factory=dict)
    profile: str | None = None
    color: str | None = None
    parent_id: str | None = None
    vertical: bool | None = None
    sent_text: list[str] = field(default_factory=list)
    hidden_polls: int = 0


class MockTerminalHost:
    """In-memory implementation of TerminalHost.

    ``visibility_delay_polls`` hides each new terminal from that many
    ``list_terminals`` calls, mimicking a host that reports new terminals late.
    With ``report_split_handles`` off, ``split_terminal`` returns None.
    """

    def __init__(
        self,
        *,
        profiles: Iterable[str] = (),
        visibility_delay_polls: int = 0,
        report_split_handles: bool = True,
    ) -> None:
        self.terminals: list[MockTerminal] = []
        self.disposed: list[str] = []
        self.profiles = list(profiles)
        self.visibility_delay_polls = visibility_delay_polls
        self.report_split_handles = report_split_handles
        self._ids = itertools.count(1)
        self._create_should_fail = False
        self._never_visible = False

    # Test helpers
    def open_existing(self, name: str, working_directory: str | None = None) -> TerminalHandle:
        """Add a terminal as if the operator had opened it."""
        terminal = self._add(CreateTerminalOptions(name=name, working_directory=working_directory))
        terminal.hidden_polls = 0
        return self._handle(terminal)

    def set_create_failure(self, should_fail: bool) -> None:
        """Make create_terminal and split_terminal raise TerminalSpawnError."""
        self._create_should_fail = should_fail

    def set_never_visible(self, never: bool) -> None:
        """New terminals never show up in list_terminals."""
        self._never_visible = never

    def get(self, terminal_id: str) -> MockTerminal:
        return next(t for t in self.terminals if t.id == terminal_id)

    def _add(self, options: CreateTerminalOptions, **extra: Any) -> MockTerminal:
        if self._create_should_fail:
            raise TerminalSpawnError("Mock create failure", terminal_name=options.name)
        terminal = MockTerminal(
            id=f"mock-terminal-{next(self._ids)}",
            name=options.name,
            working_directory=options.working_directory,
            environment=dict(options.environment),
            profile=options.profile,
            color=options.color,
            hidden_polls=-1 if self._never_visible else self.visibility_delay_polls,
            **extra,
        )
        self.terminals.append(terminal)
        return terminal

    @staticmethod
    def _handle(terminal: MockTerminal) -> TerminalHandle:
        return TerminalHandle(
            id=terminal.id,
            name=terminal.name,
            working_directory=terminal.working_directory,
        )

    # TerminalHost
    async def create_terminal(self, options: CreateTerminalOptions) -> TerminalHandle:
        return self._handle(self._add(options))

    async def split_terminal(
        self,
        parent: TerminalHandle,
        options: CreateTerminalOptions,
        *,
        vertical: bool = True,
    ) -> TerminalHandle | None:
        terminal = self._add(options, parent_id=parent.id, vertical=vertical)
        # Split panes start with the parent's name until renamed
        terminal.name = self.get(parent.id).name
        if not self.report_split_handles:
            return None
        return self._handle(terminal)

    async def rename_terminal(self, handle: TerminalHandle, name: str) -> None:
        self.get(handle.id).name = name
        handle.name = name

    async def send_text(self, handle: TerminalHandle, text: str) -> None:
        self.get(handle.id).sent_text.append(text)

    async def list_terminals(self) -> list[TerminalHandle]:
        visible = []
        for terminal in self.terminals:
            if terminal.hidden_polls < 0:
                continue
            if terminal.hidden_polls > 0:
                terminal.hidden_polls -= 1
                continue
            visible.append(self._handle(terminal))
        return visible

    async def dispose_terminal(self, handle: TerminalHandle) -> None:
        self.terminals = [t for t in self.terminals if t.id != handle.id]
        self.disposed.append(handle.id)

    async def list_profiles(self) -> list[str]:
        return list(self.profiles)


class ScriptedPrompter:
    """PromptSurface that replays queued answers.

    Answers are consumed in order by ``ask_text``, ``choose``, ``choose_many``
    and ``confirm``. For ``choose`` an answer is a choice label; for
    ``choose_many`` a list of labels. ``CANCELLED`` stands for the operator
    backing out. Text answers rejected by the validator are recorded in
    ``validation_errors`` and the next answer is used instead.
    """

    def __init__(self, answers: Iterable[Any] = ()) -> None:
        self.answers: list[Any] = list(answers)
        self.prompts: list[tuple[str, str]] = []
        self.choices_shown: list[list[str]] = []
        self.notifications: list[tuple[str, Severity]] = []
        self.validation_errors: list[str] = []

    def add_answers(self, *answers: Any) -> None:
        self.answers.extend(answers)

    def _next(self, kind: str, prompt: str) -> Any:
        self.prompts.append((kind, prompt))
        if not self.answers:
            raise AssertionError(f"No scripted answer for {kind} prompt: {prompt!r}")
        return self.answers.pop(0)

    @staticmethod
    def _value_for(label: str, choices: Sequence[Choice[T]]) -> T:
        for choice in choices:
            if choice.label == label:
                return choice.value
        raise AssertionError(f"No choice labelled {label!r} in {[c.label for c in choices]}")

    async def ask_text(
        self,
        prompt: str,
        *,
        placeholder: str = "",
        value: str = "",
        validate: Validator | None = None,
    ) -> str | Cancelled:
        while True:
            answer = self._next("text", prompt)
            if answer is CANCELLED:
                return CANCELLED
            error = validate(answer) if validate else None
            if error is None:
                return answer
            self.validation_errors.append(error)

    async def choose(
        self,
        prompt: str,
        choices: Sequence[Choice[T]],
        *,
        title: str = "",
    ) -> T | Cancelled:
        self.choices_shown.append([choice.label for choice in choices])
        answer = self._next("choose", prompt)
        if answer is CANCELLED:
            return CANCELLED
        return self._value_for(answer, choices)

    async def choose_many(
        self,
        prompt: str,
        choices: Sequence[Choice[T]],
        *,
        title: str = "",
    ) -> list[T] | Cancelled:
        self.choices_shown.append([choice.label for choice in choices])
        answer = self._next("choose_many", prompt)
        if answer is CANCELLED:
            return CANCELLED
        return [self._value_for(label, choices) for label in answer]

    async def confirm(
        self,
        message: str,
        *,
        confirm_label: str = "Yes",
        cancel_label: str = "No",
    ) -> bool:
        return bool(self._next("confirm", message))

    def notify(self, message: str, severity: Severity = "information") -> None:
        self.notifications.append((message, severity))
