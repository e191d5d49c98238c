"""
Fault taxonomy, rendering and small utilities.

Scope
- Validate trigger()/__replace__ semantics and cause chaining.
- Validate rich rendering of headers and hints.
- Validate Unset/coalesce/ordinal helpers used across messages.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console
from rich.text import Text

from bosun import CommandNode, ConsoleReporter
from bosun.faults import (
    FaultCode,
    CommandException,
    BindingError,
    MissingArgumentError,
    InvalidArgumentError,
    UnknownTypeError,
    HandlerError,
    trigger,
    getdoc,
)
from bosun.utils import Unset, coalesce, ordinal, rename


def render(renderable):
    console = Console(file=io.StringIO(), width=100, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestFaults(TestCase):
    def testTaxonomy(self):
        for kind in (MissingArgumentError, InvalidArgumentError, UnknownTypeError):
            self.assertTrue(issubclass(kind, BindingError))
        self.assertTrue(issubclass(HandlerError, CommandException))

    def testTriggerRaisesCopyWithOptions(self):
        fault = MissingArgumentError("missing required argument 'player' at first position")
        with self.assertRaises(MissingArgumentError) as context:
            trigger(fault, param="player", code=FaultCode.MISSING_ARGUMENT)
        self.assertIsNot(context.exception, fault)
        self.assertEqual(context.exception.param, "player")
        self.assertEqual(context.exception.code, FaultCode.MISSING_ARGUMENT)
        self.assertEqual(str(context.exception), fault.message)
        self.assertNotIn("param", fault.options)

    def testTriggerChainsCause(self):
        cause = ValueError("not a number")
        with self.assertRaises(InvalidArgumentError) as context:
            trigger(InvalidArgumentError("invalid value"), cause=cause, raw="x")
        self.assertIs(context.exception.__cause__, cause)
        self.assertEqual(context.exception.raw, "x")

    def testTriggerRequiresTriggerable(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))

    def testCopyReplace(self):
        fault = HandlerError("failed", tag="command")
        replaced = copy.replace(fault, tag="subcommand")
        self.assertEqual(replaced.tag, "subcommand")
        self.assertEqual(fault.tag, "command")

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            HandlerError(42)
        with self.assertRaises(TypeError):
            copy.replace(HandlerError("failed"), "positional")
        self.assertEqual(HandlerError(Text("styled")).message.plain, "styled")

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            HandlerError("failed").options["tag"] = "x"

    def testRenderingHeaderAndHint(self):
        node = CommandNode("admin")
        child = node.attach(CommandNode("give"))
        output = render(MissingArgumentError(
            "missing required argument 'player' at first position",
            title="missing argument",
            code=FaultCode.MISSING_ARGUMENT,
            hint="provide a value for <player>",
            node=child,
        ))
        self.assertIn("[ admin — 21201 | Missing Argument ]", output)
        self.assertIn("missing required argument 'player' at first position", output)
        self.assertIn("→ provide a value for <player>", output)

    def testRenderingWithoutNodeOrCode(self):
        output = render(HandlerError("failed", colorful=False))
        self.assertIn("[ bosun — ? | Handlererror ]", output)

    def testFancyRenderingUsesPanel(self):
        output = render(HandlerError("failed", title="handler error", fancy=True))
        self.assertIn("Handler Error", output)
        self.assertIn("╭", output)

    def testConsoleReporterWrapsPlainErrors(self):
        console = Console(file=io.StringIO(), width=100, color_system=None)
        ConsoleReporter(console).report("tab completer", RuntimeError("boom"))
        output = console.file.getvalue()
        self.assertIn("Handler Error", output)
        self.assertIn("unhandled error in tab completer: boom", output)

    def testNormalizeWithoutHostMapping(self):
        self.assertEqual(FaultCode.DUPLICATE_NAME.normalize(), "21101")

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.TASK_REJECTED))
        with self.assertRaises(TypeError):
            getdoc(21501)


class TestUtils(TestCase):
    def testUnsetIsFalseySingleton(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIsInstance(Unset, str | Unset)

    def testCoalesceKeepsFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertIsNone(coalesce(None, "fallback"))

    def testRenameForms(self):
        @rename("greeting")
        def hello():
            pass

        self.assertEqual((hello.__name__, hello.__qualname__), ("greeting", "greeting"))
        self.assertIs(rename(hello, "salute"), hello)
        self.assertEqual(hello.__name__, "salute")
        with self.assertRaises(TypeError):
            rename(hello)
        with self.assertRaises(TypeError):
            rename("not callable", "name")

    def testOrdinals(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(103), "103rd")
        self.assertEqual(ordinal(112), "112th")


if __name__ == "__main__":
    unittest.main()
