"""
Tab completion behavioral tests.

Scope
- Validate prefix filtering over child names and aliases.
- Validate permission filtering and permission-gated custom completers.
- Validate failure isolation (reported, never raised) and read-only walks.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from bosun import CompletionEngine, Registry, builder
from bosun.faults import FaultCode, HandlerError


class Sender:
    def __init__(self, *permissions):
        self.permissions = set(permissions)

    def has_permission(self, permission, /):
        return permission in self.permissions

    def send_message(self, message, /):
        raise AssertionError("completion must not message the sender")

    def is_player_like(self):
        return True


class Reporter:
    def __init__(self):
        self.reports = []

    def report(self, tag, error, /):
        self.reports.append((tag, error))


class TestCompletion(TestCase):
    def setUp(self):
        self.calls = []
        self.registry = Registry()

        def executor(context):
            self.calls.append(context)

        def players(sender, args):
            return [name for name in ("steve", "alex", "sam") if name.startswith(args[-1].lower())]

        (
            builder("gamemode")
            .executor(executor)
            .subcommand(builder("survival").aliases("s", "0").executor(executor))
            .subcommand(builder("creative").aliases("c", "1").executor(executor))
            .subcommand(builder("spectator").permission("game.spectate").executor(executor))
            .register(self.registry)
        )
        (
            builder("tell")
            .parameter("player")
            .parameter("message", catchall=True)
            .completer(players)
            .executor(executor)
            .register(self.registry)
        )
        (
            builder("admin")
            .subcommand(builder("kick").permission("game.kick").completer(players).executor(executor))
            .register(self.registry)
        )
        self.reporter = Reporter()
        self.engine = CompletionEngine(self.registry, reporter=self.reporter)

    def testPrefixMatchesChildNames(self):
        self.assertEqual(self.engine.complete(Sender(), "gamemode", ["su"]), ["survival"])

    def testPrefixIsCaseInsensitive(self):
        self.assertEqual(self.engine.complete(Sender(), "GAMEMODE", ["SU"]), ["survival"])

    def testEmptyPrefixListsNamesAndAliases(self):
        self.assertEqual(
            self.engine.complete(Sender(), "gamemode", [""]),
            ["survival", "s", "0", "creative", "c", "1"],
        )

    def testAliasesAreSuggested(self):
        self.assertEqual(self.engine.complete(Sender(), "gamemode", ["c"]), ["creative", "c"])

    def testChildrenFilteredByPermission(self):
        self.assertEqual(self.engine.complete(Sender(), "gamemode", ["sp"]), [])
        self.assertEqual(self.engine.complete(Sender("game.spectate"), "gamemode", ["sp"]), ["spectator"])

    def testEmptyArgumentsAndUnknownRoot(self):
        self.assertEqual(self.engine.complete(Sender(), "gamemode", []), [])
        self.assertEqual(self.engine.complete(Sender(), "nothing", ["x"]), [])

    def testDeeperPositionsWithoutCompleter(self):
        self.assertEqual(self.engine.complete(Sender(), "gamemode", ["survival", "x"]), [])

    def testCustomCompleter(self):
        self.assertEqual(self.engine.complete(Sender(), "tell", ["s"]), ["steve", "sam"])
        self.assertEqual(self.engine.complete(Sender(), "tell", ["steve", "hel"]), [])

    def testCustomCompleterOnSubcommand(self):
        self.assertEqual(self.engine.complete(Sender("game.kick"), "admin", ["kick", "a"]), ["alex"])

    def testCustomCompleterIsPermissionGated(self):
        self.assertEqual(self.engine.complete(Sender(), "admin", ["kick", "a"]), [])

    def testFailingCompleterIsReported(self):
        registry = Registry()

        def broken(sender, args):
            raise RuntimeError("broken")

        builder("warp").completer(broken).register(registry)
        reporter = Reporter()
        self.assertEqual(CompletionEngine(registry, reporter=reporter).complete(Sender(), "warp", ["x"]), [])
        tag, error = reporter.reports[0]
        self.assertEqual(tag, "tab completer")
        self.assertIsInstance(error, HandlerError)
        self.assertEqual(error.code, FaultCode.COMPLETER_ERROR)

    def testSingleStringFromCompleterIsReported(self):
        registry = Registry()
        builder("warp").completer(lambda sender, args: "hello").register(registry)
        reporter = Reporter()
        self.assertEqual(CompletionEngine(registry, reporter=reporter).complete(Sender(), "warp", ["h"]), [])
        tag, error = reporter.reports[0]
        self.assertEqual(tag, "tab completer")
        self.assertIsInstance(error.options["cause"], TypeError)

    def testCompletionNeverExecutes(self):
        for args in (["s"], ["survival", ""], [""]):
            self.engine.complete(Sender(), "gamemode", args)
        self.assertEqual(self.calls, [])
        self.assertEqual(self.reporter.reports, [])

    def testRegistryMustBeRegistry(self):
        with self.assertRaises(TypeError):
            CompletionEngine([])


if __name__ == "__main__":
    unittest.main()
