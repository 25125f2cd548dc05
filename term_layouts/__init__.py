"""Terminal layouts for iTerm2.

Save the arrangement of open terminals (which ones sit side by side in split
panes, their names, directories and start-up commands) and recreate it later.

Public API Usage:
    from term_layouts import LayoutRepository, JsonFileStore, LayoutReplayer

    repository = LayoutRepository(JsonFileStore("~/.config/term-layouts"))
    for layout in repository.get_all():
        print(layout.name, layout.summary)

    # Replay against any TerminalHost (iTerm2, or a mock in tests)
    result = await LayoutReplayer(host).apply_layout(layout)
"""

__version__ = "0.1.0"

from term_layouts.config import load_global_config, load_merged_config, save_global_config
from term_layouts.exceptions import (
    DuplicateNameError,
    LayoutNotFoundError,
    StorageError,
    TermLayoutsError,
    ValidationError,
)
from term_layouts.migration import migrate_document, migrate_record
from term_layouts.models import (
    AppConfig,
    AppSettings,
    TerminalGroup,
    TerminalLayout,
    TerminalSpec,
)
from term_layouts.partitioner import GroupingStrategy, GroupPartitioner
from term_layouts.ports import CreateTerminalOptions, TerminalHandle, TerminalHost
from term_layouts.prompts import CANCELLED, Cancelled, Choice, PromptSurface, is_cancelled
from term_layouts.replay import LayoutReplayer, ReplayResult
from term_layouts.repository import LayoutRepository
from term_layouts.storage import JsonFileStore, KeyValueStore, MemoryStore
from term_layouts.workflows import LayoutWorkflows

__all__ = [
    "__version__",
    # Models
    "AppConfig",
    "AppSettings",
    "TerminalGroup",
    "TerminalLayout",
    "TerminalSpec",
    # Persistence
    "JsonFileStore",
    "KeyValueStore",
    "LayoutRepository",
    "MemoryStore",
    "migrate_document",
    "migrate_record",
    # Grouping and replay
    "CreateTerminalOptions",
    "GroupPartitioner",
    "GroupingStrategy",
    "LayoutReplayer",
    "LayoutWorkflows",
    "ReplayResult",
    "TerminalHandle",
    "TerminalHost",
    # Prompts
    "CANCELLED",
    "Cancelled",
    "Choice",
    "PromptSurface",
    "is_cancelled",
    # Configuration
    "load_global_config",
    "load_merged_config",
    "save_global_config",
    # Errors
    "DuplicateNameError",
    "LayoutNotFoundError",
    "StorageError",
    "TermLayoutsError",
    "ValidationError",
]
