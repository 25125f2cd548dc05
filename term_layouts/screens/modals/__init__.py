"""Modal dialogs."""

from .confirm import ConfirmModal
from .multi_select import MultiSelectModal
from .select import SelectModal, choice_prompt
from .text_input import TextInputModal

__all__ = [
    "ConfirmModal",
    "MultiSelectModal",
    "SelectModal",
    "TextInputModal",
    "choice_prompt",
]
