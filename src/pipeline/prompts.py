# Command table and prompt templates.
# A recognised command selects a label; the prompt sent to the backend is
#   <preamble><LABEL>: <user text>

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

MISSING_ARGUMENT_NOTICE = "Please, enter your topic or phrase"

GENERATION_APOLOGY = """\
Sorry, I could not write anything for this request right now.
Please try again in a little while.
"""

DEFAULT_COMMANDS: Dict[str, str] = {
    "/topic": "TOPIC",
    "/phrase": "PHRASE",
}


@dataclass(frozen=True)
class CommandRule:
    prefix: str
    label: str


def build_rules(commands: Optional[Mapping[str, str]] = None) -> List[CommandRule]:
    """Turn a prefix -> label mapping into rules, longest prefix first."""
    commands = commands or DEFAULT_COMMANDS
    rules = [CommandRule(prefix=p.strip(), label=l.strip()) for p, l in commands.items() if p.strip()]
    return sorted(rules, key=lambda r: len(r.prefix), reverse=True)


def parse_command(
    text: str,
    rules: Sequence[CommandRule],
    bot_username: Optional[str] = None,
) -> Optional[Tuple[CommandRule, str]]:
    """
    Match text against the command table.

    Returns (rule, argument) or None when no command matches. The prefix must
    be followed by the end of text, whitespace or an @botname mention, so
    "/topics" does not trigger "/topic". When bot_username is given, commands
    addressed to any other bot are ignored. The argument may be empty.
    """
    if not text:
        return None
    for rule in rules:
        if not text.startswith(rule.prefix):
            continue
        rest = text[len(rule.prefix):]
        if rest.startswith("@"):
            # "/topic@MyBot cats" in group chats
            parts = rest.split(None, 1)
            mention = parts[0][1:]
            if not mention:
                continue
            if bot_username and mention.lower() != bot_username.lstrip("@").lower():
                return None
            rest = parts[1] if len(parts) > 1 else ""
        elif rest and not rest[0].isspace():
            continue
        return rule, rest.strip()
    return None


def compose_prompt(preamble: str, label: str, argument: str) -> str:
    return f"{preamble}{label}: {argument}"
