from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

from blockchat.logging import correlation_context, log_with_context
from services import metrics as metrics_service
from services.catalog import ItemCatalog, ItemNotFoundError
from services.chat_feed import split_command_line
from services.commands_registry import (
    COMMANDS,
    ROLE_HOP,
    ROLE_OP,
    SHORTCUT_COMMANDS,
    CommandSpec,
    grouped_commands,
    known_roots,
    resolve_root,
)
from services.console import ConsoleSink, say
from services.grants import build_grant_lines
from services.quantity import split_item_args
from services.user_store import UserStore, minutes

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "!"
DEFAULT_RULES = "Be nice. No griefing. Ask before building near others."
DEFAULT_CONSUMABLE = "322"
DEFAULT_TIMER_FREQUENCY = 30
OP_SIGIL = "@"
HOP_SIGIL = "%"

Handler = Callable[[str, List[str]], None]


@dataclass
class CommandRequest:
    raw: str
    name: str
    args: List[str]


def parse_command(text: str, prefix: str = DEFAULT_PREFIX) -> Optional[CommandRequest]:
    raw = str(text or "").strip()
    if not prefix or not raw.startswith(prefix):
        return None

    parts = split_command_line(raw[len(prefix):])
    if not parts:
        return None

    name = parts[0].strip().lower()
    if not name:
        return None
    return CommandRequest(raw=raw, name=name, args=parts[1:])


class Dispatcher:
    """Runs chat commands against shared per-run state.

    Every handler reports back through the console sink. Commands run one at
    a time; a shortcut replay finishes before ``dispatch`` returns. Nothing
    raised by a handler escapes :meth:`dispatch`.
    """

    def __init__(
        self,
        catalog: ItemCatalog,
        store: UserStore,
        console: ConsoleSink,
        *,
        properties: Optional[Mapping[str, str]] = None,
        rules: str = DEFAULT_RULES,
        consumable: str = DEFAULT_CONSUMABLE,
        default_frequency: int = DEFAULT_TIMER_FREQUENCY,
        timer_quantity: int = 1,
        prefix: str = DEFAULT_PREFIX,
    ):
        self.catalog = catalog
        self.store = store
        self.console = console
        self.properties: Mapping[str, str] = dict(properties or {})
        self.rules = rules
        self.consumable = str(consumable)
        self.default_frequency = int(default_frequency)
        self.timer_quantity = int(timer_quantity)
        self.prefix = prefix
        self.counter = 0
        self.handlers: Dict[str, Handler] = {name: getattr(self, f"cmd_{name}") for name in known_roots()}

    # ── Entry points ──
    def handle_chat(self, user: str, text: str) -> bool:
        """Dispatch a chat message if it is a prefixed command."""
        req = parse_command(text, self.prefix)
        if req is None:
            return False
        self.dispatch(user, req.name, req.args)
        return True

    def dispatch(self, user: str, verb: str, args: List[str], *, via_shortcut: bool = False) -> None:
        name = resolve_root(verb)
        with correlation_context():
            outcome = self._run(user, name, list(args), via_shortcut=via_shortcut)
            metrics_service.record_command(name or verb, outcome)
            log_with_context(
                logger,
                logging.INFO,
                f"!{name or verb} from {user}: {outcome}",
                user=user,
                verb=name or verb,
                args=list(args),
                outcome=outcome,
                via_shortcut=via_shortcut,
            )

    def _run(self, user: str, name: str, args: List[str], *, via_shortcut: bool) -> str:
        spec = COMMANDS.get(name)
        if spec is None:
            self._say(f"Unknown command {self.prefix}{name}. Try {self.prefix}help.")
            return "unknown"
        if via_shortcut and name in SHORTCUT_COMMANDS:
            self._say("Shortcuts cannot run other shortcuts.")
            return "rejected"
        if not self.allowed(user, spec):
            logger.info("Denied !%s for %s", name, user)
            self._say(f"{user} is not allowed to use {self.prefix}{name}.")
            return "denied"
        if len(args) < spec.min_args:
            self._say(f"Usage: {spec.usage}")
            return "usage"

        try:
            with metrics_service.metrics.timer("command", labels={"verb": name}):
                self.handlers[name](user, args)
        except Exception:
            logger.exception("Command !%s from %s failed", name, user)
            self._say(f"Command {self.prefix}{name} failed.")
            return "error"
        return "ok"

    def allowed(self, user: str, spec: CommandSpec) -> bool:
        if spec.role == ROLE_OP:
            return self.store.is_op(user)
        if spec.role == ROLE_HOP:
            return self.store.is_op(user) or self.store.is_hop(user)
        return True

    def tick(self) -> None:
        """Advance the timer counter one step and fire any due item timers."""
        self.counter += 1
        for user, item in self.store.due_timers(self.counter):
            self.grant(user, item, self.timer_quantity)

    # ── Helpers ──
    def _say(self, text: str) -> None:
        self.console.puts(say(text))

    def resolve_item(self, phrase: str) -> Optional[str]:
        try:
            item = self.catalog.resolve(phrase)
        except ItemNotFoundError as exc:
            logger.info("Item lookup failed for %r", phrase)
            metrics_service.record_resolution(False)
            self._say(str(exc))
            return None
        metrics_service.record_resolution(True)
        return item

    def grant(self, user: str, item: str, quantity: int) -> None:
        lines = build_grant_lines(user, item, quantity)
        self.console.write_lines(lines)
        metrics_service.record_grant_lines(len(lines))

    # ── Roles ──
    def cmd_hop(self, user: str, args: List[str]) -> None:
        target = args[0]
        self.store.add_hop(target)
        self._say(f"{target} is now a hop, thanks {user}!")

    def cmd_dehop(self, user: str, args: List[str]) -> None:
        target = args[0]
        self.store.remove_hop(target)
        self._say(f"{target} has been de-hoped, thanks {user}!")

    # ── Items ──
    def cmd_give(self, user: str, args: List[str]) -> None:
        phrase, quantity = split_item_args(1, args)
        item = self.resolve_item(phrase)
        if item is None:
            return
        self.grant(user, item, quantity)

    def cmd_kit(self, user: str, args: List[str]) -> None:
        label = args[0]
        entries = self.catalog.get_kit(label)
        if entries is None:
            self._say(f"{label} is not a valid kit.")
            self.cmd_kitlist(user, [])
            return

        for entry in entries:
            if isinstance(entry, tuple):
                name, quantity = entry
            else:
                name, quantity = entry, 1
            item = self.resolve_item(str(name))
            if item is None:
                continue
            self.grant(user, item, int(quantity))

    def cmd_kitlist(self, user: str, args: List[str]) -> None:
        self._say(f"Kits: {', '.join(self.catalog.kit_names())}")

    def cmd_nom(self, user: str, args: List[str]) -> None:
        self.grant(user, self.consumable, 1)

    # ── Players ──
    def cmd_tp(self, user: str, args: List[str]) -> None:
        self.console.puts(f"tp {user} {args[0]}")

    def cmd_tpall(self, user: str, args: List[str]) -> None:
        for connected in self.store.roster:
            self.cmd_tp(connected, [user])

    def cmd_list(self, user: str, args: List[str]) -> None:
        names = []
        for connected in self.store.roster:
            pre, suf = "", ""
            if connected == user:
                pre, suf = "[", "]"
            if self.store.is_op(connected):
                pre += OP_SIGIL
            if self.store.is_hop(connected):
                pre += HOP_SIGIL
            names.append(f"{pre}{connected}{suf}")
        self._say(", ".join(names))

    def cmd_uptime(self, user: str, args: List[str]) -> None:
        target = args[0] if args else user
        logged = self.store.logged_seconds(target)
        elapsed = self.store.session_seconds(target)

        if elapsed is None:
            if logged is None:
                self._say(f"{target} does not exist.")
            else:
                self._say(f"{target} has {minutes(logged)} minutes of logged time.")
            return

        total = ""
        if logged is not None:
            total = f"  Out of a total of {minutes(logged + elapsed)} minutes."
        self._say(f"{target} has been online for {minutes(elapsed)} minutes.{total}")

    # ── Timers ──
    def cmd_addtimer(self, user: str, args: List[str]) -> None:
        phrase, frequency = split_item_args(self.default_frequency, args)
        if frequency < 1:
            self._say("Timer frequency must be at least 1 second.")
            return
        item = self.resolve_item(phrase)
        if item is None:
            return
        self.store.set_timer(user, item, frequency)
        self._say(f"Timer added for {user}.  Giving item id {item} every {frequency} seconds.")

    def cmd_deltimer(self, user: str, args: List[str]) -> None:
        item = self.resolve_item(" ".join(args))
        if item is None:
            return
        if self.store.remove_timer(user, item):
            self._say(f"Timer for item id {item} removed for {user}.")

    def cmd_printtimer(self, user: str, args: List[str]) -> None:
        timers = self.store.timers(user)
        if not timers:
            self._say(f"No timers have been added for {user}.")
            return
        for item, frequency in timers.items():
            self._say(f"{item} every {frequency} seconds.")

    def cmd_printtime(self, user: str, args: List[str]) -> None:
        self._say(f"Timer is at {self.counter}.")

    # ── Shortcuts ──
    def cmd_s(self, user: str, args: List[str]) -> None:
        label, command = args[0], args[1:]
        if not command:
            saved = self.store.get_shortcut(user, label)
            if saved is None:
                self._say(f"{label} is not a valid shortcut for {user}.")
                return
            self.dispatch(user, saved[0], saved[1:], via_shortcut=True)
            return

        verb = command[0]
        if self.prefix and verb.startswith(self.prefix):
            verb = verb[len(self.prefix):]
        root = resolve_root(verb)
        if root not in known_roots():
            self._say(f"{verb} is not a command.")
            return
        if root in SHORTCUT_COMMANDS:
            self._say("Shortcuts cannot run other shortcuts.")
            return

        self.store.set_shortcut(user, label, [verb] + command[1:])
        self._say(f"Shortcut labelled {label} for {user} has been added.")

    def cmd_shortcuts(self, user: str, args: List[str]) -> None:
        labels = ", ".join(self.store.shortcut_labels(user))
        self._say(f"Shortcuts for {user}: {labels}.")

    # ── Info ──
    def cmd_help(self, user: str, args: List[str]) -> None:
        for specs in grouped_commands().values():
            for spec in specs:
                self._say(f"{spec.usage} - {spec.description}")

    def cmd_rules(self, user: str, args: List[str]) -> None:
        for line in str(self.rules).splitlines() or [""]:
            if line.strip():
                self._say(line.strip())

    def cmd_property(self, user: str, args: List[str]) -> None:
        key = args[0]
        if key not in self.properties:
            logger.info("Unknown server property %r", key)
            return
        self._say(f"{key} is currently {self.properties[key]}")
