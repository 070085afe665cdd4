from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Set

ROLE_OP = "op"
ROLE_HOP = "hop"

GROUP_ORDER: List[str] = [
    "Items",
    "Players",
    "Timers",
    "Shortcuts",
    "Info",
    "Roles",
]


@dataclass(frozen=True)
class CommandSpec:
    name: str
    usage: str
    description: str
    group: str
    role: Optional[str] = None
    min_args: int = 0
    default_help: bool = True

    @property
    def restricted(self) -> bool:
        return self.role is not None


COMMAND_ALIASES: Dict[str, str] = {
    "who": "list",
    "kits": "kitlist",
    "timers": "printtimer",
    "shortcut": "s",
}


def _c(
    name: str,
    usage: str,
    description: str,
    group: str,
    *,
    role: Optional[str] = None,
    min_args: int = 0,
    default_help: bool = True,
) -> CommandSpec:
    return CommandSpec(
        name=name,
        usage=usage,
        description=description,
        group=group,
        role=role,
        min_args=min_args,
        default_help=default_help,
    )


COMMANDS: Dict[str, CommandSpec] = {
    # Items
    "give": _c("give", "!give item [quantity]", "give yourself an item", "Items", role=ROLE_HOP, min_args=1),
    "kit": _c("kit", "!kit kit_name", "give yourself a kit", "Items", role=ROLE_HOP, min_args=1),
    "kitlist": _c("kitlist", "!kitlist", "list available kits", "Items"),
    "nom": _c("nom", "!nom", "have a golden apple", "Items", role=ROLE_HOP),
    # Players
    "tp": _c("tp", "!tp target_user", "teleport to a player", "Players", role=ROLE_HOP, min_args=1),
    "tpall": _c("tpall", "!tpall", "teleport everyone to you", "Players", role=ROLE_OP),
    "list": _c("list", "!list", "list connected players", "Players"),
    "uptime": _c("uptime", "!uptime [user]", "connected and total minutes", "Players"),
    # Timers
    "addtimer": _c("addtimer", "!addtimer item [frequency]", "receive an item every N seconds", "Timers", role=ROLE_HOP, min_args=1),
    "deltimer": _c("deltimer", "!deltimer item", "remove an item timer", "Timers", role=ROLE_HOP, min_args=1),
    "printtimer": _c("printtimer", "!printtimer", "list your timers", "Timers"),
    "printtime": _c("printtime", "!printtime", "current timer tick", "Timers", default_help=False),
    # Shortcuts
    "s": _c("s", "!s label [command args...]", "save or run a shortcut", "Shortcuts", min_args=1),
    "shortcuts": _c("shortcuts", "!shortcuts", "list your shortcuts", "Shortcuts"),
    # Info
    "help": _c("help", "!help", "show command help", "Info"),
    "rules": _c("rules", "!rules", "show the server rules", "Info"),
    "property": _c("property", "!property key", "show a server property", "Info", min_args=1),
    # Roles
    "hop": _c("hop", "!hop user", "grant half-op", "Roles", role=ROLE_OP, min_args=1),
    "dehop": _c("dehop", "!dehop user", "revoke half-op", "Roles", role=ROLE_OP, min_args=1),
}

SHORTCUT_COMMANDS: Set[str] = {"s", "shortcuts"}


def resolve_root(command_name: str) -> str:
    key = str(command_name or "").strip().lower()
    if not key:
        return ""
    return COMMAND_ALIASES.get(key, key)


def command_specs() -> List[CommandSpec]:
    return list(COMMANDS.values())


def get_spec(command_name: str) -> Optional[CommandSpec]:
    return COMMANDS.get(resolve_root(command_name))


def known_roots() -> Set[str]:
    return set(COMMANDS.keys())


def grouped_commands(*, include_non_default: bool = False) -> Dict[str, List[CommandSpec]]:
    groups: Dict[str, List[CommandSpec]] = {name: [] for name in GROUP_ORDER}
    for spec in command_specs():
        if not include_non_default and not spec.default_help:
            continue
        groups.setdefault(spec.group, []).append(spec)
    return {k: v for k, v in groups.items() if v}


def validate_registry(handlers: Mapping[str, Callable[..., None]]) -> List[str]:
    issues: List[str] = []
    for key, spec in COMMANDS.items():
        if key != spec.name:
            issues.append(f"Command registered under wrong key: {key} -> {spec.name}")
        if not spec.usage.startswith("!" + spec.name):
            issues.append(f"Command usage must start with '!{spec.name}': {spec.usage}")
        if spec.group not in GROUP_ORDER:
            issues.append(f"Unknown command group '{spec.group}' on {spec.name}")
        if spec.role not in (None, ROLE_OP, ROLE_HOP):
            issues.append(f"Unknown role '{spec.role}' on {spec.name}")
        if spec.name not in handlers:
            issues.append(f"Missing handler: {spec.name}")

    for alias, target in COMMAND_ALIASES.items():
        if target not in COMMANDS:
            issues.append(f"Alias {alias} points at unknown command {target}")
        if alias in COMMANDS:
            issues.append(f"Alias {alias} shadows a command")

    return issues
