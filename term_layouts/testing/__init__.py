"""Testing utilities for term_layouts.

Mock implementations of the terminal host and prompt protocols, for unit
testing without iTerm2 or a terminal UI.
"""

from term_layouts.testing.mock_terminal import (
    MockTerminal,
    MockTerminalHost,
    ScriptedPrompter,
)

__all__ = [
    "MockTerminal",
    "MockTerminalHost",
    "ScriptedPrompter",
]
