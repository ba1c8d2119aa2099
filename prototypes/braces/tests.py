"""
    braces.tests
    ~~~~~~~~~~~~

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD, see LICENSE.rst
"""
import sys
import time
import logging
from io import StringIO
from unittest import TestCase
from contextlib import redirect_stdout

from braces.tokens import Token, Span
from braces.table import (
    BraceTable, MirrorTable, NotFound, unicode_mirror, BIDI_MIRRORING,
    DEFAULT_TABLE
)
from braces.ast import Expression, Braced, Letters, Digits, Operator
from braces.grammar import (
    Grammar, Options, MatchCollector, BracedMatch, UnmatchedOpen,
    ParseFailure, DEFAULT_OPTIONS, parse, parse_braced_subexpressions
)
from braces.report import report, report_failure
from braces.__main__ import main


WORKED_EXAMPLE = "([b - (a + 1)] * 7)"

ANGLES = BraceTable({"<": ">", "<<": ">>"})


def summarize(result):
    return [
        (match.start, match.opening.lexeme, match.closing.lexeme, match.inner)
        for match in result.matches
    ]


class TestToken(TestCase):
    def test_at(self):
        self.assertEqual(Token.at("<{", 3), Token("<{", Span(3, 5)))

    def test_equality(self):
        self.assertEqual(Token("(", Span(0, 1)), Token("(", Span(0, 1)))
        self.assertNotEqual(Token("(", Span(0, 1)), Token("(", Span(1, 2)))
        self.assertNotEqual(Token("(", Span(0, 1)), Token("[", Span(0, 1)))


class TestBraceTable(TestCase):
    def test_closing_for(self):
        self.assertEqual(DEFAULT_TABLE.closing_for("("), ")")
        self.assertEqual(DEFAULT_TABLE.closing_for("["), "]")
        self.assertEqual(DEFAULT_TABLE.closing_for("{"), "}")

    def test_closing_for_not_found(self):
        with self.assertRaises(NotFound) as context:
            DEFAULT_TABLE.closing_for("<")
        self.assertEqual(context.exception.opening, "<")
        self.assertIsInstance(context.exception, KeyError)

    def test_openings_at_longest_first(self):
        table = BraceTable({"<": ">", "<{": "}>", "(": ")"})
        self.assertEqual(list(table.openings_at("<{a}>", 0)), ["<{", "<"])
        self.assertEqual(list(table.openings_at("<a>", 0)), ["<"])
        self.assertEqual(list(table.openings_at("<a>", 1)), [])

    def test_openings(self):
        self.assertEqual(ANGLES.openings, ["<<", "<"])

    def test_closings(self):
        self.assertEqual(DEFAULT_TABLE.closings, frozenset(")]}"))

    def test_empty_brace(self):
        with self.assertRaises(ValueError):
            BraceTable({"": ")"})
        with self.assertRaises(ValueError):
            BraceTable({"(": ""})

    def test_equality(self):
        self.assertEqual(BraceTable({"(": ")"}), BraceTable([("(", ")")]))
        self.assertNotEqual(BraceTable({"(": ")"}), DEFAULT_TABLE)


class TestMirror(TestCase):
    def test_unicode_mirror(self):
        self.assertEqual(unicode_mirror("<{"), "}>")
        self.assertEqual(unicode_mirror("("), ")")
        self.assertEqual(unicode_mirror("«⟨"), "⟩»")
        self.assertEqual(unicode_mirror("⌈"), "⌉")

    def test_unicode_mirror_without_glyph(self):
        self.assertEqual(unicode_mirror("*"), "*")
        self.assertEqual(unicode_mirror("/*"), "*/")

    def test_mirroring_is_symmetric(self):
        for character, mirrored in BIDI_MIRRORING.items():
            self.assertNotEqual(character, mirrored)
            self.assertEqual(BIDI_MIRRORING[mirrored], character)

    def test_closing_for(self):
        table = MirrorTable()
        self.assertEqual(table.closing_for("<<<"), ">>>")
        self.assertEqual(table.closing_for("⟦"), "⟧")

    def test_openings_at(self):
        table = MirrorTable()
        self.assertEqual(list(table.openings_at("<{a}>", 0)), ["<{", "<"])
        self.assertEqual(list(table.openings_at("<{a}>", 2)), [])
        self.assertEqual(list(table.openings_at("( a)", 0)), ["("])


class TestOptions(TestCase):
    def test_defaults(self):
        self.assertEqual(DEFAULT_OPTIONS.operators, frozenset("+-*/"))
        self.assertFalse(DEFAULT_OPTIONS.significant_whitespace)
        self.assertEqual(DEFAULT_OPTIONS.strategy, "static")

    def test_equality(self):
        self.assertEqual(Options(), DEFAULT_OPTIONS)
        self.assertEqual(Options(operators="/*-+"), DEFAULT_OPTIONS)
        self.assertNotEqual(Options(strategy="mirror"), DEFAULT_OPTIONS)

    def test_unknown_strategy(self):
        with self.assertRaises(ValueError):
            Options(strategy="guess")

    def test_invalid_operator(self):
        with self.assertRaises(ValueError):
            Options(operators="+ ")
        with self.assertRaises(ValueError):
            Options(operators="x")

    def test_table_from_strategy(self):
        self.assertEqual(Grammar().table, DEFAULT_TABLE)
        self.assertEqual(Grammar(options=Options(strategy="mirror")).table, MirrorTable())
        self.assertEqual(Grammar(ANGLES, Options(strategy="mirror")).table, ANGLES)


class TestMatchCollector(TestCase):
    def make_match(self, start, inner):
        expression = Expression([Letters(Token.at(inner, start + 1))])
        braced = Braced(
            Token.at("(", start),
            expression,
            Token.at(")", start + 1 + len(inner))
        )
        string = " " * start + "(" + inner + ")"
        return BracedMatch(braced, string)

    def test_deduplicates_by_start(self):
        collector = MatchCollector()
        first = self.make_match(0, "a")
        collector.record(first)
        collector.record(self.make_match(0, "ab"))
        self.assertEqual(collector.results(), [first])
        self.assertEqual(len(collector), 1)

    def test_keeps_record_order(self):
        collector = MatchCollector()
        matches = [
            self.make_match(4, "a"),
            self.make_match(1, "b"),
            self.make_match(4, "c"),
            self.make_match(0, "d")
        ]
        for match in matches:
            collector.record(match)
        self.assertEqual(
            collector.results(),
            [matches[0], matches[1], matches[3]]
        )


class TestGrammar(TestCase):
    def test_worked_example(self):
        result = parse(WORKED_EXAMPLE)
        self.assertTrue(result)
        self.assertEqual(summarize(result), [
            (6, "(", ")", "a + 1"),
            (1, "[", "]", "b - (a + 1)"),
            (0, "(", ")", "[b - (a + 1)] * 7")
        ])

    def test_balanced_nesting(self):
        result = parse("{[(a)]}")
        self.assertEqual(summarize(result), [
            (2, "(", ")", "a"),
            (1, "[", "]", "(a)"),
            (0, "{", "}", "[(a)]")
        ])

    def test_siblings(self):
        result = parse("(1) + [2] * {x}")
        self.assertEqual(summarize(result), [
            (0, "(", ")", "1"),
            (6, "[", "]", "2"),
            (12, "{", "}", "x")
        ])

    def test_without_braces(self):
        result = parse("a+1")
        self.assertTrue(result)
        self.assertEqual(result.matches, [])
        self.assertEqual(result.tree, Expression([
            Letters(Token("a", Span(0, 1))),
            Operator(Token("+", Span(1, 2))),
            Digits(Token("1", Span(2, 3)))
        ]))

    def test_tree(self):
        result = parse("(ab)")
        self.assertEqual(result.tree, Expression([
            Braced(
                Token("(", Span(0, 1)),
                Expression([Letters(Token("ab", Span(1, 3)))]),
                Token(")", Span(3, 4))
            )
        ]))

    def test_tree_contains_reported_braces(self):
        result = parse(WORKED_EXAMPLE)
        self.assertEqual(
            [braced.span.start for braced in result.tree.iter_braced()],
            [match.start for match in result.matches]
        )

    def test_longest_opening_first(self):
        table = BraceTable({"<": ">", "<{": "}>"})
        self.assertEqual(summarize(parse("<{a}>", table)), [
            (0, "<{", "}>", "a")
        ])
        self.assertEqual(summarize(parse("<a>", table)), [(0, "<", ">", "a")])

    def test_backtrack_to_shorter_opening(self):
        result = parse("<<a> + b>", ANGLES)
        self.assertEqual(summarize(result), [
            (1, "<", ">", "a"),
            (0, "<", ">", "<a> + b")
        ])

    def test_abandoned_matches_are_reported(self):
        result = parse("<<<a>> + b>", ANGLES)
        self.assertTrue(result)
        self.assertEqual(summarize(result), [
            (2, "<", ">", "a"),
            (1, "<<", ">>", "a"),
            (0, "<", ">", "<<a>> + b")
        ])
        self.assertEqual(
            [braced.span.start for braced in result.tree.iter_braced()],
            [1, 0]
        )

    def test_backtrack_into_letters(self):
        result = parse("(ab)", BraceTable({"(": "b)"}))
        self.assertEqual(summarize(result), [(0, "(", "b)", "a")])

    def test_whitespace(self):
        self.assertEqual(summarize(parse(" ( a ) ")), [(1, "(", ")", "a")])

    def test_significant_whitespace(self):
        options = Options(significant_whitespace=True)
        self.assertTrue(parse_braced_subexpressions("(a+1)", options=options))
        self.assertFalse(parse_braced_subexpressions("(a + 1)", options=options))
        self.assertFalse(parse_braced_subexpressions(" (a)", options=options))

    def test_operators(self):
        options = Options(operators="^")
        self.assertTrue(parse_braced_subexpressions("(a ^ 2)", options=options))
        self.assertFalse(parse_braced_subexpressions("(a + 2)", options=options))

    def test_operator_required(self):
        result = parse("(a)(b)")
        self.assertFalse(result)
        self.assertIsInstance(result.error, ParseFailure)
        self.assertEqual(result.error.reason, "found unexpected (")

    def test_mirror(self):
        options = Options(strategy="mirror")
        result = parse_braced_subexpressions("<<<123>>>", options=options)
        self.assertEqual(summarize(result), [(0, "<<<", ">>>", "123")])
        result = parse_braced_subexpressions("<{a}> * «1»", options=options)
        self.assertEqual(summarize(result), [
            (0, "<{", "}>", "a"),
            (8, "«", "»", "1")
        ])

    def test_mirror_unmatched(self):
        result = parse_braced_subexpressions(
            "<<<123>>", options=Options(strategy="mirror")
        )
        self.assertFalse(result)
        self.assertEqual(result.matches, [])
        error = result.error
        self.assertIsInstance(error, UnmatchedOpen)
        self.assertEqual(
            error.reason,
            "unexpected end of string, expected > corresponding to <"
        )
        self.assertEqual(error.annotation, (
            "<<<123>>\n"
            "^-------^"
        ))

    def test_idempotence(self):
        grammar = Grammar(options=Options(strategy="mirror"))
        for string in [WORKED_EXAMPLE, "<<<123>>", "<{a}>"]:
            self.assertEqual(grammar.parse(string), grammar.parse(string))

    def test_deep_nesting(self):
        depth = 1000
        result = parse("(" * depth + "a" + ")" * depth)
        self.assertTrue(result)
        self.assertEqual(len(result.matches), depth)
        self.assertEqual(
            [match.start for match in result.matches],
            list(range(depth - 1, -1, -1))
        )
        self.assertEqual(result.matches[0].inner, "a")

    def test_recursion_limit_restored(self):
        limit = sys.getrecursionlimit()
        parse("(" * 100 + "a" + ")" * 100)
        self.assertEqual(sys.getrecursionlimit(), limit)

    def test_mirror_long_opening_run(self):
        options = Options(strategy="mirror")
        start = time.perf_counter()
        result = parse_braced_subexpressions("<" * 30 + "1>>", options=options)
        self.assertLess(time.perf_counter() - start, 5)
        self.assertFalse(result)

    def test_mirror_alternatives_replayed(self):
        options = Options(strategy="mirror")
        result = parse_braced_subexpressions("<<<1>>>", options=options)
        self.assertEqual(summarize(result), [(0, "<<<", ">>>", "1")])
        result = parse_braced_subexpressions("<<<1> + 2>>", options=options)
        self.assertEqual(summarize(result), [
            (2, "<", ">", "1"),
            (0, "<<", ">>", "<1> + 2")
        ])

    def test_failures_have_own_matches(self):
        failure = parse("(a")
        failure.matches.append("x")
        self.assertEqual(parse("(b").matches, [])


class TestErrors(TestCase):
    def assertFailure(self, string, error_cls, reason, annotation):
        result = parse(string)
        self.assertFalse(result)
        self.assertIsInstance(result.error, error_cls)
        self.assertEqual(result.error.reason, reason)
        self.assertEqual(result.error.annotation, annotation)

    def test_missing_end(self):
        self.assertFailure(
            "(a",
            UnmatchedOpen,
            "unexpected end of string, expected ) corresponding to (",
            "(a\n"
            "^-^"
        )

    def test_wrong_end(self):
        self.assertFailure(
            "(a]",
            UnmatchedOpen,
            "expected ) corresponding to (, got ]",
            "(a]\n"
            "^-^"
        )

    def test_missing_begin(self):
        self.assertFailure(
            "a)",
            ParseFailure,
            "found unmatched )",
            "a)\n"
            " ^"
        )

    def test_empty(self):
        self.assertFailure(
            "",
            ParseFailure,
            "unexpected end of string, expected expression",
            "\n"
            "^"
        )

    def test_missing_operand(self):
        self.assertFailure(
            "a +",
            ParseFailure,
            "unexpected end of string, expected expression",
            "a +\n"
            "   ^"
        )

    def test_unknown_brace(self):
        self.assertFailure(
            "<a>",
            ParseFailure,
            "expected expression, got <",
            "<a>\n"
            "^"
        )

    def test_unmatched_open_attributes(self):
        error = parse("[a + (b]").error
        self.assertIsInstance(error, UnmatchedOpen)
        self.assertEqual(error.opening, Token("(", Span(5, 6)))
        self.assertEqual(error.expected, ")")

    def test_raise_error(self):
        with self.assertRaises(UnmatchedOpen):
            parse("(a").raise_error()


class TestReport(TestCase):
    def test_report(self):
        self.assertEqual(list(report(parse(WORKED_EXAMPLE))), [
            "Braces: ( * ) ||| Subexpr: a + 1",
            "Braces: [ * ] ||| Subexpr: b - (a + 1)",
            "Braces: ( * ) ||| Subexpr: [b - (a + 1)] * 7"
        ])

    def test_report_failed(self):
        self.assertEqual(list(report(parse("(a"))), ["FAILED"])

    def test_report_failure(self):
        self.assertEqual(report_failure(parse("(a")), (
            "unexpected end of string, expected ) corresponding to (\n"
            "(a\n"
            "^-^"
        ))


class TestMain(TestCase):
    def tearDown(self):
        log = logging.getLogger("braces")
        log.handlers = []
        log.setLevel(logging.NOTSET)

    def run_main(self, *arguments):
        output = StringIO()
        with redirect_stdout(output):
            status = main(["braces"] + list(arguments))
        return status, output.getvalue()

    def test_match(self):
        status, output = self.run_main("match", WORKED_EXAMPLE)
        self.assertEqual(status, 0)
        self.assertEqual(output, (
            "Braces: ( * ) ||| Subexpr: a + 1\n"
            "Braces: [ * ] ||| Subexpr: b - (a + 1)\n"
            "Braces: ( * ) ||| Subexpr: [b - (a + 1)] * 7\n"
        ))

    def test_match_mirror(self):
        status, output = self.run_main("match", "--mirror", "<<<123>>>", "<<<123>>")
        self.assertEqual(status, 1)
        self.assertEqual(output, (
            "Braces: <<< * >>> ||| Subexpr: 123\n"
            "FAILED\n"
        ))

    def test_match_explain(self):
        status, output = self.run_main("match", "--explain", "(a")
        self.assertEqual(status, 1)
        self.assertEqual(output, (
            "FAILED\n"
            "unexpected end of string, expected ) corresponding to (\n"
            "(a\n"
            "^-^\n"
        ))

    def test_match_operators(self):
        status, output = self.run_main("match", "--operators=%", "(a % 2)")
        self.assertEqual(status, 0)
        self.assertEqual(output, "Braces: ( * ) ||| Subexpr: a % 2\n")

    def test_match_verbose(self):
        status, output = self.run_main("match", "--verbose", "(a)")
        self.assertEqual(status, 0)
        self.assertIn("parsing '(a)'", output)
        self.assertIn("Braces: ( * ) ||| Subexpr: a\n", output)
