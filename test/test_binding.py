"""
Dataclass binding behavioral tests (derive registries, apply results).

Scope
- Validate from_dataclass field mapping: keys, short keys, kinds, defaults, metadata.
- Validate to_dataclass conversion for str/int/float/bool/callable types and sub scopes.
- Validate bind() end to end and its faults.

Conventions
- Test method names follow CamelCase per project convention.
- Dataclasses are declared at module level so type hints resolve.
"""

from __future__ import annotations

import dataclasses
import pathlib
import unittest
from dataclasses import dataclass, field
from unittest import TestCase

from flagtree import Kind, Registry, from_dataclass, to_dataclass, bind
from flagtree.faults import ConversionError, KeyNotFoundError, DuplicateKeyError


@dataclass
class Sync:
    target: str = ""
    verbose: bool = False
    jobs: int = 1


@dataclass
class Options:
    mode: str = "best"
    mirror: str = ""
    ratio: float = 0.5
    dry: bool = False
    path: pathlib.Path | None = None
    sync: Sync = field(default_factory=Sync)
    port: int = field(default=80, metadata={"key": "listen", "short": "p", "help": "port", "param_help": "port"})
    strict: bool = field(default=False, metadata={"kind": Kind.OPTIONAL})
    token: str = field(default="", metadata={"kind": Kind.REQUIRED})
    cache: dict = field(default_factory=dict, init=False)


@dataclass
class Clashing:
    name: str = ""
    other: str = field(default="", metadata={"key": "name"})


class TestFromDataclass(TestCase):
    """Behavioral tests for from_dataclass()."""

    def setUp(self):
        self.registry = from_dataclass(Options)

    def testKeysFollowFields(self):
        self.assertEqual(
            [flag.key for flag in self.registry],
            ["mode", "mirror", "ratio", "dry", "path", "sync", "listen", "strict", "token"],
        )

    def testShortKeysTakeFirstFreeCharacter(self):
        self.assertEqual(self.registry["mode"].short, "m")
        self.assertEqual(self.registry["mirror"].short, "")
        self.assertEqual(self.registry["ratio"].short, "r")
        self.assertEqual(self.registry["path"].short, "p")
        self.assertEqual(self.registry["listen"].short, "")

    def testKinds(self):
        self.assertIs(self.registry["mode"].kind, Kind.OPTIONAL)
        self.assertIs(self.registry["dry"].kind, Kind.SWITCH)
        self.assertIs(self.registry["sync"].kind, Kind.SUB)
        self.assertIs(self.registry["strict"].kind, Kind.OPTIONAL)
        self.assertIs(self.registry["token"].kind, Kind.REQUIRED)

    def testDefaultsAreStrings(self):
        self.assertEqual(self.registry["mode"].default, "best")
        self.assertEqual(self.registry["ratio"].default, "0.5")
        self.assertEqual(self.registry["path"].default, "")
        self.assertEqual(self.registry["sync"].child["jobs"].default, "1")

    def testMetadata(self):
        flag = self.registry["listen"]
        self.assertEqual(flag.help, "port")
        self.assertEqual(flag.param_help, "port")

    def testNestedRegistry(self):
        child = self.registry["sync"].child
        self.assertIsInstance(child, Registry)
        self.assertEqual([flag.key for flag in child], ["target", "verbose", "jobs"])

    def testInstanceAccepted(self):
        self.assertEqual(len(from_dataclass(Options())), len(self.registry))

    def testNonDataclassRejected(self):
        with self.assertRaises(TypeError):
            from_dataclass(object)

    def testClashingKeysRejected(self):
        with self.assertRaises(DuplicateKeyError):
            from_dataclass(Clashing)


class TestToDataclass(TestCase):
    """Behavioral tests for to_dataclass() and bind()."""

    def testBindConvertsTypes(self):
        options, result = bind(Options, [
            "--ratio", "0.75", "-d", "--path", "/tmp/x", "--listen", "8080", "--strict", "yes", "--token", "abc",
        ])
        self.assertTrue(result.parsed())
        self.assertEqual(options.ratio, 0.75)
        self.assertIs(options.dry, True)
        self.assertEqual(options.path, pathlib.Path("/tmp/x"))
        self.assertEqual(options.port, 8080)
        self.assertIs(options.strict, True)
        self.assertEqual(options.token, "abc")
        self.assertEqual(options.mode, "best")

    def testBindSubScope(self):
        options, _ = bind(Options, ["--token", "abc", "-s", "-t", "world", "-v", "-j", "4"])
        self.assertEqual(options.sync, Sync("world", True, 4))
        self.assertEqual(options.token, "abc")

    def testBareOptionalKeepsField(self):
        options, _ = bind(Options, ["--token", "abc", "--mirror"])
        self.assertEqual(options.mirror, "")

    def testBareOptionalUsesDefault(self):
        instance = Options(mode="fast")
        options, _ = bind(instance, ["--token", "abc", "-m"])
        self.assertIs(options, instance)
        self.assertEqual(options.mode, "best")

    def testConversionError(self):
        with self.assertRaises(ConversionError) as context:
            bind(Options, ["--token", "abc", "--listen", "http"])
        self.assertEqual(context.exception.options["key"], "listen")
        self.assertEqual(context.exception.options["value"], "http")

    def testBooleanConversionError(self):
        with self.assertRaises(ConversionError):
            bind(Options, ["--token", "abc", "--strict", "maybe"])

    def testFieldWithoutFlag(self):
        registry = Registry()
        registry.optional("target", "t")
        with self.assertRaises(KeyNotFoundError):
            to_dataclass(Sync(), registry.parse(["-t", "x"]))

    def testClassRejected(self):
        result = from_dataclass(Sync).parse(["-t", "x"])
        with self.assertRaises(TypeError):
            to_dataclass(Sync, result)

    def testApplyIsInPlace(self):
        instance = Sync()
        result = from_dataclass(Sync).parse(["-t", "x", "-j", "2"])
        self.assertIs(to_dataclass(instance, result), instance)
        self.assertEqual(dataclasses.asdict(instance), {"target": "x", "verbose": False, "jobs": 2})


if __name__ == "__main__":
    unittest.main()
