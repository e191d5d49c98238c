"""
Parameter specs, converters and positional binding.

Scope
- Validate Parameter construction (names, tags, required/default interplay).
- Validate built-in converters (ranges, boolean leniency, real parsing).
- Validate bind(): defaults, missing/invalid arguments, catch-all, surplus.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from bosun import Parameter, ConverterRegistry, converters, entity, bind
from bosun.faults import (
    FaultCode,
    MissingArgumentError,
    InvalidArgumentError,
    UnknownTypeError,
)


class TestParameter(TestCase):
    """Construction-time validation of parameter specs."""

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            Parameter(42)

    def testNameRejectsEmptyAndWhitespace(self):
        with self.assertRaises(ValueError):
            Parameter("   ")
        with self.assertRaises(ValueError):
            Parameter("two words")

    def testTypeTagIsLowercased(self):
        self.assertEqual(Parameter("amount", "INTEGER").type, "integer")

    def testTypeMustBeTagOrCallable(self):
        with self.assertRaises(TypeError):
            Parameter("amount", 3)

    def testRequiredDefaultsToTrueWithoutDefault(self):
        parameter = Parameter("player")
        self.assertTrue(parameter.required)
        self.assertFalse(parameter.defaulted)
        self.assertIsNone(parameter.default)

    def testDefaultMakesParameterOptional(self):
        parameter = Parameter("amount", "integer", default="1")
        self.assertFalse(parameter.required)
        self.assertTrue(parameter.optional)
        self.assertEqual(parameter.default, "1")

    def testExplicitNoneDefaultIsDefaulted(self):
        parameter = Parameter("reason", default=None)
        self.assertTrue(parameter.defaulted)
        self.assertIsNone(parameter.default)

    def testMetavarRendering(self):
        self.assertEqual(Parameter("player").metavar, "<player>")
        self.assertEqual(Parameter("amount", required=False).metavar, "[amount]")
        self.assertEqual(Parameter("message", catchall=True).metavar, "<message...>")

    def testDescrEmptyRejected(self):
        with self.assertRaises(ValueError):
            Parameter("player", descr="  ")

    def testReprListsFields(self):
        self.assertTrue(repr(Parameter("player")).startswith("parameter(name='player'"))


class TestConverters(TestCase):
    """Built-in converter tags and the converter registry."""

    def testBuiltinTagsAndAliases(self):
        for tag in ("string", "text", "integer", "int", "long", "real", "double", "float", "boolean", "bool"):
            self.assertIn(tag, converters)
        self.assertIn("INT", converters)
        self.assertNotIn("player", converters)
        self.assertNotIn(3, converters)

    def testIntegerIsThirtyTwoBit(self):
        self.assertEqual(converters["integer"]("-2147483648"), -2 ** 31)
        with self.assertRaises(ValueError):
            converters["integer"]("2147483648")
        with self.assertRaises(ValueError):
            converters["integer"]("1.5")

    def testLongIsSixtyFourBit(self):
        self.assertEqual(converters["long"]("2147483648"), 2 ** 31)
        with self.assertRaises(ValueError):
            converters["long"]("9223372036854775808")

    def testRealParsing(self):
        self.assertEqual(converters["double"]("1.5"), 1.5)
        self.assertEqual(converters["real"]("-2e3"), -2000.0)
        self.assertEqual(converters["real"](".5"), 0.5)
        self.assertEqual(converters["float"]("Infinity"), float("inf"))
        self.assertEqual(converters["float"]("-Infinity"), float("-inf"))
        self.assertNotEqual(converters["real"]("NaN"), converters["real"]("NaN"))
        for raw in ("abc", "1_000", "inf", "nan", "infinity", "-inf", "1e", ""):
            with self.subTest(raw=raw), self.assertRaises(ValueError):
                converters["real"](raw)

    def testBooleanNeverFails(self):
        self.assertIs(converters["boolean"]("TRUE"), True)
        self.assertIs(converters["bool"]("true"), True)
        self.assertIs(converters["boolean"]("yes"), False)
        self.assertIs(converters["boolean"](""), False)

    def testRegisterRejectsDuplicateTagsUnlessReplacing(self):
        registry = converters.copy()
        with self.assertRaises(ValueError):
            registry.register("INT", str)
        registry.register("int", str, replace=True)
        self.assertIs(registry["int"], str)

    def testCopyIsIndependent(self):
        registry = converters.copy()
        registry.register("player", str.upper)
        self.assertIn("player", registry)
        self.assertNotIn("player", converters)

    def testRegisterValidatesArguments(self):
        registry = ConverterRegistry()
        with self.assertRaises(TypeError):
            registry.register("x", "not callable")
        with self.assertRaises(ValueError):
            registry.register(" ", str)
        with self.assertRaises(ValueError):
            registry.register("x", str, "X")

    def testEntityConverter(self):
        online = {"steve": object()}
        convert = entity(online.get, kind="player")
        self.assertIs(convert("steve"), online["steve"])
        with self.assertRaisesRegex(LookupError, "player not found: alex"):
            convert("alex")


class TestBind(TestCase):
    """Positional binding algorithm."""

    def testBindsInDeclaredOrder(self):
        parameters = (Parameter("player"), Parameter("amount", "integer"))
        self.assertEqual(bind(parameters, ["steve", "3"]), {"player": "steve", "amount": 3})

    def testStringDefaultGoesThroughConverter(self):
        parameters = (Parameter("player"), Parameter("amount", "integer", default="1"))
        self.assertEqual(bind(parameters, ["steve"]), {"player": "steve", "amount": 1})

    def testNonStringDefaultBoundAsIs(self):
        marker = object()
        self.assertIs(bind((Parameter("target", default=marker),), [])["target"], marker)

    def testOptionalWithoutDefaultBindsNone(self):
        self.assertEqual(bind((Parameter("reason", required=False),), []), {"reason": None})

    def testMissingRequiredArgument(self):
        parameters = (Parameter("player"), Parameter("amount", "integer"))
        with self.assertRaises(MissingArgumentError) as context:
            bind(parameters, ["steve"])
        self.assertEqual(context.exception.param, "amount")
        self.assertEqual(context.exception.code, FaultCode.MISSING_ARGUMENT)
        self.assertEqual(str(context.exception), "missing required argument 'amount' at second position")

    def testInvalidArgumentCarriesRawValue(self):
        with self.assertRaises(InvalidArgumentError) as context:
            bind((Parameter("amount", "integer"),), ["lots"])
        self.assertEqual(context.exception.param, "amount")
        self.assertEqual(context.exception.raw, "lots")
        self.assertIsInstance(context.exception.__cause__, ValueError)

    def testInvalidStringDefault(self):
        with self.assertRaises(InvalidArgumentError) as context:
            bind((Parameter("amount", "integer", default="many"),), [])
        self.assertEqual(context.exception.raw, "many")

    def testUnknownTypeTag(self):
        with self.assertRaises(UnknownTypeError):
            bind((Parameter("target", "player"),), ["steve"])

    def testCustomRegistry(self):
        registry = converters.copy()
        registry.register("player", str.upper)
        self.assertEqual(bind((Parameter("target", "player"),), ["steve"], registry), {"target": "STEVE"})

    def testCallableType(self):
        self.assertEqual(bind((Parameter("size", len),), ["four"]), {"size": 4})

    def testCatchallJoinsRemainingTokens(self):
        parameters = (Parameter("player"), Parameter("message", catchall=True))
        self.assertEqual(
            bind(parameters, ["steve", "hello", "there", "friend"]),
            {"player": "steve", "message": "hello there friend"},
        )

    def testSurplusTokensIgnored(self):
        self.assertEqual(bind((Parameter("player"),), ["steve", "extra"]), {"player": "steve"})

    def testNoParameters(self):
        self.assertEqual(bind((), ["anything"]), {})


if __name__ == "__main__":
    unittest.main()
