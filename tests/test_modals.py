"""Tests for the prompt modals."""

from textual.screen import ModalScreen

from term_layouts.prompts import CANCELLED, Choice, validate_layout_name
from term_layouts.screens.modals import (
    ConfirmModal,
    MultiSelectModal,
    SelectModal,
    TextInputModal,
    choice_prompt,
)


def capture_dismiss(modal) -> list:
    dismissed_with = []
    modal.dismiss = lambda result: dismissed_with.append(result)
    return dismissed_with


CHOICES = [Choice("Load", "load"), Choice("Edit", "edit"), Choice("Delete", "delete")]


class TestChoicePrompt:
    """Test rendering of choice lines."""

    def test_label_only(self):
        assert choice_prompt(Choice("Dev", 1)).plain == "Dev"

    def test_description_and_detail(self):
        text = choice_prompt(Choice("Dev", 1, description="2 terminal(s)", detail="Backend"))
        assert text.plain == "Dev  2 terminal(s)\n  Backend"


class TestTextInputModal:
    """Test TextInputModal actions."""

    def test_is_modal_screen(self):
        assert isinstance(TextInputModal("Name"), ModalScreen)

    def test_submit_returns_value(self):
        modal = TextInputModal("Name")
        dismissed_with = capture_dismiss(modal)
        modal.submit("Dev")
        assert dismissed_with == ["Dev"]

    def test_submit_rejected_by_validator(self):
        modal = TextInputModal("Name", validate=validate_layout_name)
        dismissed_with = capture_dismiss(modal)
        modal.submit("   ")
        assert dismissed_with == []
        assert modal.error_message == "Layout name cannot be empty"

    def test_error_cleared_on_valid_submit(self):
        modal = TextInputModal("Name", validate=validate_layout_name)
        dismissed_with = capture_dismiss(modal)
        modal.submit("")
        modal.submit("Dev")
        assert modal.error_message is None
        assert dismissed_with == ["Dev"]

    def test_empty_text_is_a_value(self):
        modal = TextInputModal("Description")
        dismissed_with = capture_dismiss(modal)
        modal.submit("")
        assert dismissed_with == [""]

    def test_cancel(self):
        modal = TextInputModal("Name")
        dismissed_with = capture_dismiss(modal)
        modal.action_cancel()
        assert dismissed_with == [CANCELLED]


class TestSelectModal:
    """Test SelectModal actions."""

    def test_select_index_returns_value(self):
        modal = SelectModal("Action", CHOICES)
        dismissed_with = capture_dismiss(modal)
        modal.select_index(1)
        assert dismissed_with == ["edit"]

    def test_out_of_range_ignored(self):
        modal = SelectModal("Action", CHOICES)
        dismissed_with = capture_dismiss(modal)
        modal.select_index(7)
        assert dismissed_with == []

    def test_none_value_is_returned(self):
        modal = SelectModal("Layouts", [Choice("Create New Layout", None)])
        dismissed_with = capture_dismiss(modal)
        modal.select_index(0)
        assert dismissed_with == [None]

    def test_cancel(self):
        modal = SelectModal("Action", CHOICES)
        dismissed_with = capture_dismiss(modal)
        modal.action_cancel()
        assert dismissed_with == [CANCELLED]

    def test_escape_binding(self):
        assert "escape" in [binding.key for binding in SelectModal.BINDINGS]


class TestMultiSelectModal:
    """Test MultiSelectModal actions."""

    def test_values_follow_pick_order(self):
        modal = MultiSelectModal("Group 1", CHOICES)
        assert modal.values_for([2, 0]) == ["delete", "load"]

    def test_unknown_indexes_dropped(self):
        modal = MultiSelectModal("Group 1", CHOICES)
        assert modal.values_for([0, 9]) == ["load"]

    def test_cancel_returns_empty_list(self):
        modal = MultiSelectModal("Group 1", CHOICES)
        dismissed_with = capture_dismiss(modal)
        modal.action_cancel()
        assert dismissed_with == [[]]

    def test_bindings(self):
        keys = [binding.key for binding in MultiSelectModal.BINDINGS]
        assert "escape" in keys
        assert "ctrl+s" in keys


class TestConfirmModal:
    """Test ConfirmModal actions."""

    def test_confirm(self):
        modal = ConfirmModal("Delete?")
        dismissed_with = capture_dismiss(modal)
        modal.action_confirm()
        assert dismissed_with == [True]

    def test_cancel(self):
        modal = ConfirmModal("Delete?")
        dismissed_with = capture_dismiss(modal)
        modal.action_cancel()
        assert dismissed_with == [False]

    def test_bindings(self):
        keys = [binding.key for binding in ConfirmModal.BINDINGS]
        assert "y" in keys
        assert "n" in keys
        assert "escape" in keys
