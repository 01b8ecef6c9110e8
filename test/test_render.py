"""
Rendering behavioral tests (help table and result tree).

Scope
- Validate helptable columns, param help, and indentation of nested scopes.
- Validate resulttree content for values, bare flags and defaults.
- Validate colorless rendering to plain text.

Conventions
- Test method names follow CamelCase per project convention.
- Assertions are made on plain text rendered with to_text(); layout details
  such as border characters are not asserted.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from rich.table import Table
from rich.tree import Tree

from flagtree import Registry, helptable, resulttree, to_text


def _registry():
    sync = Registry()
    sync.required("target", "t", "sync target", "name")
    sync.switch("verbose", "v", "verbose output")

    root = Registry()
    root.optional("mode", "M", "use mode", "mode", "best")
    root.optional("ip", "", "ip address")
    root.sub("sync", sync, "S", "package sync")
    return root


class TestHelpTable(TestCase):
    """Behavioral tests for helptable()."""

    def setUp(self):
        self.text = to_text(helptable(_registry(), colorful=False), width=120)
        self.lines = self.text.splitlines()

    def testReturnsTable(self):
        self.assertIsInstance(helptable(_registry()), Table)

    def testHeaders(self):
        for header in ("Short", "Key", "Kind", "Help"):
            self.assertIn(header, self.text)

    def testRowsInDefinitionOrder(self):
        positions = [self.text.index(key) for key in ("--mode", "--ip", "--sync", "--target", "--verbose")]
        self.assertEqual(positions, sorted(positions))

    def testParamHelp(self):
        self.assertIn("--mode <mode>", self.text)
        self.assertIn("--target <name>", self.text)

    def testKindsAndHelp(self):
        row = next(line for line in self.lines if "--target" in line)
        self.assertIn("-t", row)
        self.assertIn("required", row)
        self.assertIn("sync target", row)

    def testMissingShortKeyLeavesCellEmpty(self):
        row = next(line for line in self.lines if "--ip" in line)
        self.assertNotIn("-i", row.replace("--ip", ""))

    def testNestedRowsAreIndented(self):
        sync = next(line for line in self.lines if "--sync" in line)
        target = next(line for line in self.lines if "--target" in line)
        self.assertGreater(target.index("--target"), sync.index("--sync"))

    def testTitle(self):
        text = to_text(helptable(_registry(), colorful=False, title="tool"), width=120)
        self.assertIn("tool", text.splitlines()[0])


class TestResultTree(TestCase):
    """Behavioral tests for resulttree()."""

    def setUp(self):
        self.result = _registry().parse(["-M", "--ip", "10.0.0.1", "-S", "-t", "x", "-v"])
        self.text = to_text(resulttree(self.result, colorful=False), width=120)

    def testReturnsTree(self):
        self.assertIsInstance(resulttree(self.result), Tree)

    def testValues(self):
        self.assertIn("--ip = 10.0.0.1", self.text)
        self.assertIn("--target = x", self.text)

    def testBareFlags(self):
        self.assertIn("--mode = (unset) default 'best'", self.text)
        self.assertIn("--verbose = (unset)", self.text)

    def testNestedScope(self):
        lines = self.text.splitlines()
        self.assertEqual(lines[0].rstrip(), "flags")
        sync = next(line for line in lines if line.rstrip().endswith("--sync"))
        target = next(line for line in lines if "--target" in line)
        self.assertGreater(target.index("--target"), sync.index("--sync"))

    def testOnlyGivenFlagsAppear(self):
        result = _registry().parse(["--ip", "1"])
        text = to_text(resulttree(result, colorful=False, label="root"), width=120)
        self.assertIn("--ip = 1", text)
        self.assertNotIn("--mode", text)
        self.assertNotIn("--sync", text)


if __name__ == "__main__":
    unittest.main()
