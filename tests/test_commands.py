import pytest

from services import commands
from services.catalog import ItemCatalog
from services.console import BufferConsole
from services.user_store import UserStore


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def console():
    return BufferConsole()


@pytest.fixture
def dispatcher(console, clock):
    store = UserStore(ops=["basicxman"], hops=["hopper"], clock=clock)
    for user in ("basicxman", "mike_n_7", "hopper"):
        store.connect(user)
    return commands.Dispatcher(
        ItemCatalog.from_config({}),
        store,
        console,
        properties={"spawn-monsters": "true"},
        rules="Be nice.\nNo griefing.",
    )


def test_parse_command_splits_verb_and_args():
    req = commands.parse_command("!give flint and steel 2")
    assert req is not None
    assert req.name == "give"
    assert req.args == ["flint", "and", "steel", "2"]


def test_parse_command_ignores_plain_chat():
    assert commands.parse_command("hello there") is None
    assert commands.parse_command("!") is None


def test_parse_command_survives_stray_quotes():
    req = commands.parse_command("!give jack o'lantern")
    assert req.args == ["jack", "o'lantern"]


def test_handle_chat_reports_whether_a_command_ran(dispatcher, console):
    assert dispatcher.handle_chat("basicxman", "just chatting") is False
    assert console.lines == []
    assert dispatcher.handle_chat("basicxman", "!nom") is True
    assert console.lines == ["give basicxman 322 1"]


def test_unknown_command_gives_notice(dispatcher, console):
    dispatcher.dispatch("basicxman", "fly", [])
    assert console.lines == ["say Unknown command !fly. Try !help."]


def test_give_with_quantifier(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!give cobb 1m")
    assert console.lines == ["give basicxman 4 64"]


def test_give_defaults_to_one(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!give flint and steel")
    assert console.lines == ["give basicxman 259 1"]


def test_give_batches_large_quantities(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!give cobblestone 2m10")
    assert console.lines == ["give basicxman 4 64", "give basicxman 4 64", "give basicxman 4 10"]


def test_give_unknown_item_emits_only_notice(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!give xyzzy 5")
    assert console.lines == ["say No item xyzzy found."]


def test_give_without_args_shows_usage(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!give")
    assert console.lines == ["say Usage: !give item [quantity]"]


def test_give_denied_for_regular_user(dispatcher, console):
    dispatcher.handle_chat("mike_n_7", "!give diamond 64")
    assert console.lines == ["say mike_n_7 is not allowed to use !give."]


def test_hop_can_give(dispatcher, console):
    dispatcher.handle_chat("hopper", "!give diamond")
    assert console.lines == ["give hopper 264 1"]


def test_hop_and_dehop_are_idempotent(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!hop Mike_N_7")
    dispatcher.handle_chat("basicxman", "!hop mike_n_7")
    assert dispatcher.store.hops == {"hopper", "mike_n_7"}
    assert console.lines[0] == "say Mike_N_7 is now a hop, thanks basicxman!"

    dispatcher.handle_chat("basicxman", "!dehop mike_n_7")
    dispatcher.handle_chat("basicxman", "!dehop mike_n_7")
    assert dispatcher.store.hops == {"hopper"}
    assert console.lines[-1] == "say mike_n_7 has been de-hoped, thanks basicxman!"


def test_hop_requires_op(dispatcher, console):
    dispatcher.handle_chat("hopper", "!hop mike_n_7")
    assert dispatcher.store.hops == {"hopper"}
    assert console.lines == ["say hopper is not allowed to use !hop."]


def test_kit_grants_each_entry(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!kit ranged")
    assert console.lines == [
        "give basicxman 261 1",
        "give basicxman 262 64",
        "give basicxman 262 64",
        "give basicxman 262 64",
        "give basicxman 262 64",
        "give basicxman 262 64",
    ]


def test_unknown_kit_lists_kits(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!kit nope")
    assert console.lines[0] == "say nope is not a valid kit."
    assert console.lines[1].startswith("say Kits: diamond, armour")


def test_tp_and_tpall(dispatcher, console):
    dispatcher.handle_chat("hopper", "!tp mike_n_7")
    assert console.lines == ["tp hopper mike_n_7"]
    console.clear()
    dispatcher.handle_chat("basicxman", "!tpall")
    assert console.lines == [
        "tp basicxman basicxman",
        "tp mike_n_7 basicxman",
        "tp hopper basicxman",
    ]


def test_list_marks_requester_and_roles(dispatcher, console):
    dispatcher.store.add_hop("basicxman")
    dispatcher.handle_chat("mike_n_7", "!list")
    assert console.lines == ["say @%basicxman, [mike_n_7], %hopper"]


def test_list_brackets_include_sigils(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!who")
    assert console.lines == ["say [@basicxman], mike_n_7, %hopper"]


def test_uptime_unknown_user(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!uptime ghost")
    assert console.lines == ["say ghost does not exist."]


def test_uptime_connected_without_history(dispatcher, console, clock):
    clock.now += 125
    dispatcher.handle_chat("mike_n_7", "!uptime")
    assert console.lines == ["say mike_n_7 has been online for 2 minutes."]


def test_uptime_with_history_and_session(dispatcher, console, clock):
    clock.now += 600
    dispatcher.store.disconnect("mike_n_7")
    dispatcher.store.connect("mike_n_7")
    clock.now += 180
    dispatcher.handle_chat("basicxman", "!uptime mike_n_7")
    assert console.lines == ["say mike_n_7 has been online for 3 minutes.  Out of a total of 13 minutes."]


def test_uptime_history_only(dispatcher, console, clock):
    clock.now += 600
    dispatcher.store.disconnect("mike_n_7")
    dispatcher.handle_chat("basicxman", "!uptime mike_n_7")
    assert console.lines == ["say mike_n_7 has 10 minutes of logged time."]


def test_timers_add_list_remove(dispatcher, console):
    dispatcher.handle_chat("hopper", "!addtimer arrow 10")
    dispatcher.handle_chat("hopper", "!addtimer cobb")
    assert console.lines == [
        "say Timer added for hopper.  Giving item id 262 every 10 seconds.",
        "say Timer added for hopper.  Giving item id 4 every 30 seconds.",
    ]
    console.clear()

    dispatcher.handle_chat("hopper", "!printtimer")
    assert console.lines == ["say 262 every 10 seconds.", "say 4 every 30 seconds."]
    console.clear()

    dispatcher.handle_chat("hopper", "!deltimer arrow")
    dispatcher.handle_chat("hopper", "!deltimer arrow")
    assert console.lines == ["say Timer for item id 262 removed for hopper."]
    assert dispatcher.store.timers("hopper") == {"4": 30}


def test_printtimer_without_timers(dispatcher, console):
    dispatcher.handle_chat("mike_n_7", "!printtimer")
    assert console.lines == ["say No timers have been added for mike_n_7."]


def test_addtimer_unknown_item_stores_nothing(dispatcher, console):
    dispatcher.handle_chat("hopper", "!addtimer xyzzy 5")
    assert console.lines == ["say No item xyzzy found."]
    assert dispatcher.store.timers("hopper") == {}


def test_addtimer_rejects_zero_frequency(dispatcher, console):
    dispatcher.handle_chat("hopper", "!addtimer arrow 0")
    assert console.lines == ["say Timer frequency must be at least 1 second."]


def test_tick_fires_due_timers(dispatcher, console):
    dispatcher.store.set_timer("hopper", "262", 2)
    dispatcher.tick()
    assert console.lines == []
    dispatcher.tick()
    assert console.lines == ["give hopper 262 1"]
    console.clear()
    dispatcher.handle_chat("mike_n_7", "!printtime")
    assert console.lines == ["say Timer is at 2."]


def test_shortcut_round_trip(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!s cobble give cobblestone 64")
    assert console.lines == ["say Shortcut labelled cobble for basicxman has been added."]
    console.clear()

    seen = []
    original = dispatcher.dispatch

    def spy(user, verb, args, **kwargs):
        seen.append((user, verb, list(args)))
        return original(user, verb, args, **kwargs)

    dispatcher.dispatch = spy
    dispatcher.handle_chat("basicxman", "!s cobble")
    assert seen[-1] == ("basicxman", "give", ["cobblestone", "64"])
    assert console.lines == ["give basicxman 4 64"]


def test_shortcut_strips_prefix_from_verb(dispatcher, console):
    dispatcher.handle_chat("hopper", "!s mike !tp mike_n_7")
    console.clear()
    dispatcher.handle_chat("hopper", "!s mike")
    assert console.lines == ["tp hopper mike_n_7"]


def test_shortcut_missing_label(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!s nothing")
    assert console.lines == ["say nothing is not a valid shortcut for basicxman."]


def test_shortcut_cannot_store_shortcut(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!s loop s loop")
    assert console.lines == ["say Shortcuts cannot run other shortcuts."]
    assert dispatcher.store.shortcut_labels("basicxman") == []


def test_shortcut_rejects_unknown_verb(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!s x fly high")
    assert console.lines == ["say fly is not a command."]


def test_shortcut_still_checks_roles(dispatcher, console):
    dispatcher.handle_chat("mike_n_7", "!s d give diamond")
    console.clear()
    dispatcher.handle_chat("mike_n_7", "!s d")
    assert console.lines == ["say mike_n_7 is not allowed to use !give."]


def test_shortcuts_list(dispatcher, console):
    dispatcher.handle_chat("basicxman", "!s a nom")
    dispatcher.handle_chat("basicxman", "!s b list")
    console.clear()
    dispatcher.handle_chat("basicxman", "!shortcuts")
    assert console.lines == ["say Shortcuts for basicxman: a, b."]


def test_property_lookup(dispatcher, console):
    dispatcher.handle_chat("mike_n_7", "!property spawn-monsters")
    dispatcher.handle_chat("mike_n_7", "!property nope")
    assert console.lines == ["say spawn-monsters is currently true"]


def test_rules_and_help(dispatcher, console):
    dispatcher.handle_chat("mike_n_7", "!rules")
    assert console.lines == ["say Be nice.", "say No griefing."]
    console.clear()
    dispatcher.handle_chat("mike_n_7", "!help")
    assert "say !give item [quantity] - give yourself an item" in console.lines
    assert all(line.startswith("say !") for line in console.lines)
    assert not any("printtime " in line for line in console.lines)


def test_handler_errors_do_not_escape(dispatcher, console, monkeypatch):
    def boom(user, args):
        raise RuntimeError("kaboom")

    monkeypatch.setitem(dispatcher.handlers, "list", boom)
    dispatcher.handle_chat("basicxman", "!list")
    assert console.lines == ["say Command !list failed."]
