"""
Construct Recognizer Tests — classes, methods, properties and the
open-construct state machine.

Validates that:
  1. Block constructs produce one symbol spanning opener to closer
  2. Method/property names render as "name (args)"
  3. Parameters become Variables parented to their method/property
  4. Structural problems are recorded but never abort the parse
  5. Unclosed constructs are dropped
  6. Reparsing the same text gives an identical result
"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from vbs_symbols.document_parser import parse_document
from vbs_symbols.models import DiagnosticCategory, ParserSettings, SymbolKind


def _span(rng):
    return (rng.start.line, rng.start.character, rng.end.line, rng.end.character)


def _categories(result):
    return [d.category for d in result.diagnostics]


class TestClasses(unittest.TestCase):

    def test_empty_class(self):
        result = parse_document("Class Foo\nEnd Class")
        self.assertEqual(len(result.symbols), 1)
        cls = result.symbols[0]
        self.assertEqual(cls.kind, SymbolKind.CLASS)
        self.assertEqual(cls.name, "Foo")
        self.assertEqual(cls.rendered_name, "Foo")
        self.assertEqual(_span(cls.declared_range), (0, 0, 1, 9))
        self.assertEqual(_span(cls.name_range), (0, 6, 0, 9))
        self.assertIsNone(cls.parent_name)
        self.assertEqual(result.diagnostics, [])

    def test_case_insensitive_keywords(self):
        result = parse_document("CLASS Foo\nend CLASS")
        self.assertEqual([s.name for s in result.symbols], ["Foo"])

    def test_class_with_field(self):
        result = parse_document("Class C\n  Private m_x\nEnd Class")
        self.assertEqual(len(result.symbols), 2)
        field, cls = result.symbols
        self.assertEqual(cls.kind, SymbolKind.CLASS)
        self.assertEqual(cls.name, "C")
        self.assertEqual(field.kind, SymbolKind.FIELD)
        self.assertEqual(field.name, "m_x")
        self.assertEqual(field.visibility, "Private")
        self.assertEqual(field.parent_name, "C")
        self.assertEqual(_span(field.declared_range), (1, 2, 1, 13))
        self.assertEqual(_span(field.name_range), (1, 10, 1, 13))

    def test_end_class_without_open_class(self):
        result = parse_document("End Class")
        self.assertEqual(result.symbols, [])
        self.assertEqual(_categories(result), [DiagnosticCategory.STRUCTURAL_MISMATCH])

    def test_nested_class_rejected(self):
        result = parse_document("Class A\nClass B\nEnd Class")
        self.assertEqual([s.name for s in result.symbols], ["A"])
        self.assertIn(DiagnosticCategory.STRUCTURAL_MISMATCH, _categories(result))


class TestMethods(unittest.TestCase):

    def test_function_with_parameters(self):
        result = parse_document("Function Add(a, b)\nEnd Function")
        self.assertEqual(len(result.symbols), 3)
        method, a, b = result.symbols
        self.assertEqual(method.kind, SymbolKind.METHOD)
        self.assertEqual(method.rendered_name, "Add (a, b)")
        self.assertEqual(method.declared_type, "Function")
        self.assertEqual(method.parameter_text, "a, b")
        self.assertEqual(_span(method.declared_range), (0, 0, 1, 12))
        self.assertEqual(_span(method.name_range), (0, 9, 0, 12))

        self.assertEqual((a.kind, a.name, a.parent_name), (SymbolKind.VARIABLE, "a", "Add"))
        self.assertEqual((b.kind, b.name, b.parent_name), (SymbolKind.VARIABLE, "b", "Add"))
        self.assertEqual(_span(a.name_range), (0, 13, 0, 14))
        self.assertEqual(_span(b.name_range), (0, 16, 0, 17))

    def test_sub_without_parentheses(self):
        result = parse_document("Sub Main\nEnd Sub")
        self.assertEqual(len(result.symbols), 1)
        self.assertEqual(result.symbols[0].rendered_name, "Main ()")
        self.assertEqual(result.symbols[0].declared_type, "Sub")

    def test_visibility_and_default(self):
        result = parse_document("Class K\nPublic Default Function Item(i)\nEnd Function\nEnd Class")
        method = next(s for s in result.symbols if s.kind == SymbolKind.METHOD)
        self.assertEqual(method.visibility, "Public")
        self.assertEqual(method.parent_name, "K")
        self.assertEqual(method.declared_range.start.character, 0)

    def test_byval_byref_modifiers_dropped(self):
        result = parse_document("Sub S(ByVal  first,\tByRef second)\nEnd Sub")
        params = [s for s in result.symbols if s.kind == SymbolKind.VARIABLE]
        self.assertEqual([p.name for p in params], ["first", "second"])
        first, second = params
        line = "Sub S(ByVal  first,\tByRef second)"
        self.assertEqual(first.name_range.start.character, line.index("first"))
        self.assertEqual(first.declared_range.start.character, line.index("ByVal"))
        self.assertEqual(second.name_range.start.character, line.index("second"))
        self.assertEqual(second.name_range.end.character, line.index("second") + len("second"))

    def test_array_parameter_suffix_stripped(self):
        result = parse_document("Sub Fill(arr(), n)\nEnd Sub")
        params = [s.name for s in result.symbols if s.kind == SymbolKind.VARIABLE]
        self.assertEqual(params, ["arr", "n"])

    def test_nested_parentheses_not_split(self):
        result = parse_document("Sub S(a, b(c, d))\nEnd Sub")
        self.assertEqual([s.kind for s in result.symbols], [SymbolKind.METHOD])
        self.assertEqual(result.symbols[0].parameter_text, "a, b(c, d)")
        self.assertEqual(_categories(result), [DiagnosticCategory.UNSUPPORTED_PARAMETER_LIST])

    def test_mismatched_end_keyword_still_closes(self):
        result = parse_document("Function F(x)\nEnd Sub")
        methods = [s for s in result.symbols if s.kind == SymbolKind.METHOD]
        self.assertEqual(len(methods), 1)
        self.assertEqual(methods[0].declared_type, "Function")
        self.assertEqual(_categories(result), [DiagnosticCategory.STRUCTURAL_MISMATCH])

    def test_method_never_closed(self):
        result = parse_document("Function F()\nDim x")
        self.assertFalse(any(s.kind == SymbolKind.METHOD for s in result.symbols))
        self.assertIn(DiagnosticCategory.DANGLING_OPEN, _categories(result))

    def test_open_while_open_keeps_original(self):
        text = "Sub A\nSub B\nEnd Sub\nEnd Sub"
        result = parse_document(text)
        methods = [s for s in result.symbols if s.kind == SymbolKind.METHOD]
        self.assertEqual([m.name for m in methods], ["A"])
        self.assertEqual(_span(methods[0].declared_range), (0, 0, 2, 7))
        self.assertEqual(_categories(result), [
            DiagnosticCategory.STRUCTURAL_MISMATCH,  # Sub B while A open
            DiagnosticCategory.STRUCTURAL_MISMATCH,  # second End Sub
        ])

    def test_method_on_one_line(self):
        result = parse_document("Sub Ping() : End Sub")
        self.assertEqual(len(result.symbols), 1)
        self.assertEqual(_span(result.symbols[0].declared_range), (0, 0, 0, 20))

    def test_function_header_with_continuation(self):
        result = parse_document("Function Join3(a, _\n               b, c)\nEnd Function")
        params = [s for s in result.symbols if s.kind == SymbolKind.VARIABLE]
        self.assertEqual([p.name for p in params], ["a", "b", "c"])
        self.assertEqual(_span(params[1].name_range), (1, 15, 1, 16))
        self.assertEqual(_span(params[2].name_range), (1, 18, 1, 19))

    def test_stray_close_after_continuation_reports_its_own_line(self):
        result = parse_document("x = 1 : _\n  End Sub")
        self.assertEqual(_categories(result), [DiagnosticCategory.STRUCTURAL_MISMATCH])
        self.assertEqual([d.line for d in result.diagnostics], [1])

    def test_method_opened_after_continuation_starts_on_its_line(self):
        result = parse_document("x = 1 : _\nSub S()\nEnd Sub")
        self.assertEqual(result.diagnostics, [])
        self.assertEqual(_span(result.symbols[0].declared_range), (1, 0, 2, 7))


class TestProperties(unittest.TestCase):

    TEXT = (
        "Class Person\n"
        "    Private m_name\n"
        "    Public Property Get Name()\n"
        "        Name = m_name\n"
        "    End Property\n"
        "    Public Property Let Name(value)\n"
        "        m_name = value\n"
        "    End Property\n"
        "End Class\n"
    )

    @classmethod
    def setUpClass(cls):
        cls.result = parse_document(cls.TEXT)

    def test_property_symbols(self):
        props = [s for s in self.result.symbols if s.kind == SymbolKind.PROPERTY]
        self.assertEqual([p.declared_type for p in props], ["Get", "Let"])
        self.assertEqual([p.rendered_name for p in props], ["Name ()", "Name (value)"])
        self.assertTrue(all(p.parent_name == "Person" for p in props))
        self.assertEqual(_span(props[0].declared_range), (2, 4, 4, 16))

    def test_property_parameter(self):
        value = next(s for s in self.result.symbols if s.name == "value")
        self.assertEqual(value.kind, SymbolKind.VARIABLE)
        self.assertEqual(value.parent_name, "Name")

    def test_no_problems(self):
        self.assertEqual(self.result.diagnostics, [])

    def test_method_inside_property_rejected(self):
        result = parse_document("Property Get P\nSub S\nEnd Property")
        self.assertEqual([s.kind for s in result.symbols], [SymbolKind.PROPERTY])
        self.assertEqual(_categories(result), [DiagnosticCategory.STRUCTURAL_MISMATCH])

    def test_class_closed_with_open_property(self):
        result = parse_document("Class C\nProperty Get P(i)\nEnd Class")
        self.assertEqual([s.kind for s in result.symbols], [SymbolKind.CLASS])
        self.assertEqual(_categories(result), [DiagnosticCategory.DANGLING_OPEN])


class TestDocument(unittest.TestCase):

    TEXT = (
        "Option Explicit\n"
        "Const APP = \"demo: v1\" ' name\n"
        "Dim counter\n"
        "\n"
        "Class Stack\n"
        "    Private items\n"
        "    Public Sub Push(ByVal item)\n"
        "        Dim n : n = 1\n"
        "    End Sub\n"
        "End Class\n"
        "\n"
        "Function Main()\n"
        "    Dim s\n"
        "End Function\n"
    )

    def test_idempotent(self):
        first = parse_document(self.TEXT)
        second = parse_document(self.TEXT)
        self.assertEqual(first.model_dump_json(), second.model_dump_json())

    def test_symbols(self):
        result = parse_document(self.TEXT)
        names = [(s.kind, s.name, s.parent_name) for s in result.symbols]
        self.assertEqual(names, [
            (SymbolKind.CONSTANT, "APP", None),
            (SymbolKind.VARIABLE, "counter", None),
            (SymbolKind.FIELD, "items", "Stack"),
            (SymbolKind.VARIABLE, "n", "Push"),
            (SymbolKind.METHOD, "Push", "Stack"),
            (SymbolKind.VARIABLE, "item", "Push"),
            (SymbolKind.CLASS, "Stack", None),
            (SymbolKind.VARIABLE, "s", "Main"),
            (SymbolKind.METHOD, "Main", None),
        ])
        self.assertEqual(result.diagnostics, [])

    def test_problem_cap(self):
        text = "End Sub\n" * 10
        result = parse_document(text, ParserSettings(max_number_of_problems=3))
        self.assertEqual(len(result.diagnostics), 3)

    def test_unrecognized_statements(self):
        result = parse_document("x = 1\nWScript.Echo x\nIf x Then y = 2")
        self.assertEqual(result.symbols, [])
        self.assertEqual(result.diagnostics, [])


if __name__ == "__main__":
    unittest.main()
