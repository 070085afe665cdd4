from __future__ import annotations

import logging
import sys
import time
from typing import Any, Dict, Iterable, Optional

from blockchat.config import get_ops_path, get_properties_path, get_role_names, load_config
from blockchat.logging import configure_logging
from services import metrics as metrics_service
from services.catalog import ItemCatalog
from services.chat_feed import ChatMessage, Connected, Disconnected, parse_log_line
from services.commands import (
    DEFAULT_CONSUMABLE,
    DEFAULT_PREFIX,
    DEFAULT_RULES,
    DEFAULT_TIMER_FREQUENCY,
    Dispatcher,
)
from services.commands_registry import validate_registry
from services.console import ConsoleSink, StreamConsole
from services.properties import load_ops, load_properties
from services.user_store import Clock, UserStore

logger = logging.getLogger(__name__)


def build_dispatcher(
    config: Dict[str, Any],
    console: ConsoleSink,
    *,
    clock: Clock = time.time,
    properties: Optional[Dict[str, str]] = None,
) -> Dispatcher:
    commands_cfg = config.get("commands", {}) if isinstance(config.get("commands"), dict) else {}
    timers_cfg = config.get("timers", {}) if isinstance(config.get("timers"), dict) else {}

    ops = get_role_names("ops", config) + load_ops(get_ops_path(config))
    store = UserStore(ops=ops, hops=get_role_names("hops", config), clock=clock)
    if properties is None:
        properties = load_properties(get_properties_path(config))

    dispatcher = Dispatcher(
        ItemCatalog.from_config(config),
        store,
        console,
        properties=properties,
        rules=str(commands_cfg.get("rules", DEFAULT_RULES)),
        consumable=str(commands_cfg.get("consumable", DEFAULT_CONSUMABLE)),
        default_frequency=int(timers_cfg.get("default_frequency", DEFAULT_TIMER_FREQUENCY)),
        timer_quantity=int(timers_cfg.get("quantity", 1)),
        prefix=str(commands_cfg.get("prefix", DEFAULT_PREFIX)),
    )

    issues = validate_registry(dispatcher.handlers)
    for issue in issues:
        logger.error("Command registry: %s", issue)
    return dispatcher


def process_lines(dispatcher: Dispatcher, lines: Iterable[str]) -> int:
    """Feed server log lines through the dispatcher; returns commands handled."""
    handled = 0
    for line in lines:
        event = parse_log_line(line)
        if isinstance(event, Connected):
            dispatcher.store.connect(event.user)
        elif isinstance(event, Disconnected):
            dispatcher.store.disconnect(event.user)
        elif isinstance(event, ChatMessage):
            if dispatcher.handle_chat(event.user, event.text):
                handled += 1
    return handled


def main() -> None:
    config = load_config()
    configure_logging(config)
    dispatcher = build_dispatcher(config, StreamConsole(sys.stdout))
    logger.info(
        "blockchat ready: %d items, %d ops, prefix %r",
        len(dispatcher.catalog),
        len(dispatcher.store.ops),
        dispatcher.prefix,
    )
    handled = 0
    try:
        handled = process_lines(dispatcher, sys.stdin)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    logger.info("blockchat stopped after %d commands", handled)
    for line in metrics_service.format_metrics_lines():
        logger.info("metric %s", line)


if __name__ == "__main__":
    main()
