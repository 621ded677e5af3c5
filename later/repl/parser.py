"""
FILE: later/repl/parser.py
PURPOSE: Parse user input into commands and arguments for REPL
EXPORTS:
  - ParseResult (dataclass for parsed commands)
  - parse_command(input_str) -> ParseResult
DEPENDENCIES:
  - shlex (for shell-like parsing with quotes)
  - dataclasses (for ParseResult)
NOTES:
  - Handles quoted strings: add "item with spaces"
  - Supports flags: --tag work, --style numbered, --all
  - Preserves argument order for positional args
  - Case-insensitive command names
"""

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Union


@dataclass
class ParseResult:
    """
    Result of parsing a REPL command.

    Attributes:
        command: The command name (e.g., "add", "ls", "mv")
        args: Positional arguments (e.g., ["note", "3", "1"])
        flags: Flag arguments as dict (e.g., {"style": "numbered", "all": True})
        raw_input: Original input string
    """
    command: str
    args: List[str] = field(default_factory=list)
    flags: Dict[str, Union[str, bool]] = field(default_factory=dict)
    raw_input: str = ""

    def text(self, start: int = 0) -> str:
        """Positional args from start joined back into one string."""
        return " ".join(self.args[start:])


def parse_command(input_str: str) -> ParseResult:
    """
    Parse REPL input into command, args, and flags.

    Examples:
        >>> parse_command("add Buy milk")
        ParseResult(command="add", args=["Buy", "milk"], flags={})

        >>> parse_command('new note "Trip ideas" --tag travel')
        ParseResult(command="new", args=["note", "Trip ideas"], flags={"tag": "travel"})

        >>> parse_command("spaces --all")
        ParseResult(command="spaces", args=[], flags={"all": True})

    Notes:
        - Command is always the first token (case-insensitive)
        - Flags start with -- ; a flag followed by a non-flag token takes it
          as its value, otherwise it is boolean
        - Quoted strings are treated as single args
        - Empty input returns command="" with no args/flags
    """
    input_str = input_str.strip()
    if not input_str:
        return ParseResult(command="", raw_input=input_str)

    try:
        tokens = shlex.split(input_str)
    except ValueError:
        # Unclosed quote: fall back to whitespace split
        tokens = input_str.split()

    if not tokens:
        return ParseResult(command="", raw_input=input_str)

    command = tokens[0].lower()
    args: List[str] = []
    flags: Dict[str, Union[str, bool]] = {}
    i = 1

    while i < len(tokens):
        token = tokens[i]
        if token.startswith("--") and len(token) > 2:
            flag_name = token[2:]
            if i + 1 < len(tokens) and not tokens[i + 1].startswith("--"):
                flags[flag_name] = tokens[i + 1]
                i += 2
            else:
                flags[flag_name] = True
                i += 1
        else:
            args.append(token)
            i += 1

    return ParseResult(command=command, args=args, flags=flags, raw_input=input_str)
