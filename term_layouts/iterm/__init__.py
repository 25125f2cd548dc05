"""iTerm2 adapter for the terminal host port.

Re-exports:
    ItermController: Connection lifecycle management
    ItermTerminalHost: TerminalHost implementation driving iTerm2 sessions
"""

from term_layouts.iterm.connection import ItermController
from term_layouts.iterm.host import ItermTerminalHost, build_export_line, parse_hex_color

__all__ = [
    "ItermController",
    "ItermTerminalHost",
    "build_export_line",
    "parse_hex_color",
]
