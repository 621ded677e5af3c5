"""
FILE: later/repl/completer.py
PURPOSE: Autocomplete logic for REPL commands and arguments
EXPORTS:
  - LaterCompleter (Completer for command/arg completion)
  - create_completer() -> LaterCompleter
DEPENDENCIES:
  - prompt_toolkit.completion (Completer, Completion)
NOTES:
  - Suggests command names at the start of the line
  - Suggests section names (note, todo, list) after commands that take one
  - Suggests list styles after --style
  - Case-insensitive matching
"""

from typing import Iterable, List

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from ..core.constants import LIST_STYLES


class LaterCompleter(Completer):
    """
    Custom completer for the Later REPL.

    Provides context-aware autocomplete:
    - Command names at start of input
    - Section names after new/open/ls/rm/rename/mv/order
    - Flags after commands, style values after --style
    """

    COMMANDS = [
        "spaces", "use", "ls", "new", "open", "back", "items", "add", "check",
        "rm", "rename", "mv", "order", "refresh", "find", "help", "clear",
        "exit", "quit",
    ]

    SECTIONS = ["note", "todo", "list"]

    SECTION_COMMANDS = {"new", "open", "ls", "rm", "rename", "mv", "order"}

    COMMAND_FLAGS = {
        "spaces": ["--all"],
        "new": ["--tag", "--style", "--icon"],
        "add": ["--notes", "--due", "--priority"],
        "find": ["--tag", "--type"],
    }

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        text_before_cursor = document.text_before_cursor
        words = text_before_cursor.split()
        typing_word = not text_before_cursor.endswith(" ")

        # Command name
        if not words or (typing_word and len(words) == 1):
            yield from self._complete(self.COMMANDS, words[0] if words else "")
            return

        command = words[0].lower()
        current = words[-1] if typing_word else ""

        # Value for --style
        previous = words[-2] if typing_word and len(words) >= 2 else words[-1]
        if previous == "--style":
            yield from self._complete(list(LIST_STYLES), current)
            return

        # Flags
        if current.startswith("--"):
            yield from self._complete(self.COMMAND_FLAGS.get(command, []), current)
            return

        # Section name as first argument
        argument_index = len(words) - 1 if typing_word else len(words)
        if command in self.SECTION_COMMANDS and argument_index == 1:
            yield from self._complete(self.SECTIONS, current)

    @staticmethod
    def _complete(options: List[str], prefix: str) -> Iterable[Completion]:
        prefix_lower = prefix.lower()
        for option in options:
            if option.startswith(prefix_lower):
                yield Completion(option, start_position=-len(prefix))


def create_completer() -> LaterCompleter:
    """Factory function to create the REPL completer."""
    return LaterCompleter()
