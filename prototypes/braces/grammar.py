"""
    braces.grammar
    ~~~~~~~~~~~~~~

    A backtracking recursive descent parser for expressions with nested
    braces. The grammar consists of two rules calling each other::

        expression = operand (operator operand)*
        operand    = braced | letters | digits
        braced     = opening expression closing

    where `closing` is whatever the brace table says belongs to the
    `opening` that was matched. Nesting is tracked by nothing but the
    recursion of these rules.

    Rules are generators yielding every way they can match at a position,
    the preferred one first, so the caller backtracks by simply asking for
    the next alternative.

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD, see LICENSE.rst
"""
import sys
import logging
from contextlib import contextmanager

from braces.tokens import Token
from braces.table import (
    BracesException, NotFound, MirrorTable, DEFAULT_TABLE
)
from braces.ast import Expression, Braced, Letters, Digits, Operator


log = logging.getLogger(__name__)

#: Interpreter frames a single character of input may cost, every level of
#: nesting goes through four generators and takes at least two characters.
FRAMES_PER_CHARACTER = 4

#: The recursion limit is never raised beyond this, deeper input fails with
#: "nesting too deep" instead of exhausting the C stack.
MAX_RECURSION_LIMIT = 16000


class ParserError(BracesException):
    def __init__(self, reason, annotation=None):
        BracesException.__init__(self, reason, annotation)
        self.reason = reason
        self.annotation = annotation

    def __str__(self):
        if self.annotation is None:
            return self.reason
        return "%s\n%s" % (self.reason, self.annotation)


class UnmatchedOpen(ParserError):
    def __init__(self, reason, annotation, opening, expected):
        ParserError.__init__(self, reason, annotation)
        self.opening = opening
        self.expected = expected


class ParseFailure(ParserError):
    pass


STRATEGIES = {
    "static": lambda: DEFAULT_TABLE,
    "mirror": MirrorTable,
}


class Options(object):
    def __init__(self,
                 operators="+-*/",
                 significant_whitespace=False,
                 strategy="static"
                 ):
        if not isinstance(operators, str):
            raise ValueError("operators must be a string, got %r" % operators)
        for operator in operators:
            if operator.isspace() or operator.isalnum():
                raise ValueError("%r cannot be used as an operator" % operator)
        if strategy not in STRATEGIES:
            raise ValueError(
                "unknown strategy %r, expected one of %s" % (
                    strategy, ", ".join(sorted(STRATEGIES))
                )
            )
        self.operators = frozenset(operators)
        self.significant_whitespace = significant_whitespace
        self.strategy = strategy

    def make_table(self):
        return STRATEGIES[self.strategy]()

    def __eq__(self, other):
        if self is other:
            return True
        if isinstance(other, self.__class__):
            return (
                self.operators == other.operators and
                self.significant_whitespace == other.significant_whitespace and
                self.strategy == other.strategy
            )
        return NotImplemented

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return (
            hash(self.operators) ^
            hash(self.significant_whitespace) ^
            hash(self.strategy)
        )

    def __repr__(self):
        return "%s(operators=%r, significant_whitespace=%r, strategy=%r)" % (
            self.__class__.__name__,
            "".join(sorted(self.operators)),
            self.significant_whitespace,
            self.strategy
        )


DEFAULT_OPTIONS = Options()


class BracedMatch(object):
    def __init__(self, braced, string):
        self.opening = braced.opening
        self.closing = braced.closing
        self.expression = braced.expression
        self.inner = braced.expression.text(string)

    @property
    def start(self):
        return self.opening.span.start

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return (
                self.opening == other.opening and
                self.closing == other.closing and
                self.inner == other.inner and
                self.expression == other.expression
            )
        return NotImplemented

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.opening) ^ hash(self.closing) ^ hash(self.inner)

    def __repr__(self):
        return "%s(%r, %r, %r)" % (
            self.__class__.__name__,
            self.opening,
            self.closing,
            self.inner
        )


class MatchCollector(object):
    """
    Remembers every braced expression the grammar matches, including those
    abandoned later on when the parser backtracks.
    """
    def __init__(self):
        self._matches = {}

    def record(self, match):
        if match.start not in self._matches:
            log.debug("recorded %r", match)
            self._matches[match.start] = match

    def results(self):
        """
        Returns the recorded matches, one per starting position, in the order
        in which they were first recorded.
        """
        return list(self._matches.values())

    def __len__(self):
        return len(self._matches)


# Kinds of failures, the most informative one last.
EXPECTED_EXPRESSION, EXPECTED_END, EXPECTED_CLOSING = range(3)


class Input(object):
    """
    The state of a single parse: the string being parsed, the braced
    expressions collected so far and the failure that got furthest.
    """
    def __init__(self, string):
        self.string = string
        self.collector = MatchCollector()
        self.alternatives = {}
        self.failure = None

    def __len__(self):
        return len(self.string)

    def at(self, position):
        if position < len(self.string):
            return self.string[position]
        return None

    def fail(self, position, kind, *details):
        if self.failure is None or (position, kind) > self.failure[:2]:
            self.failure = (position, kind) + details

    def annotated(self, position):
        annotation = [" "] * (position + 1)
        annotation[position] = "^"
        return "%s\n%s" % (self.string, "".join(annotation))

    def annotated_range(self, start, end):
        annotation = [" "] * (end + 1)
        annotation[start] = annotation[end] = "^"
        for position in range(start + 1, end):
            annotation[position] = "-"
        return "%s\n%s" % (self.string, "".join(annotation))

    def error(self, closings=frozenset()):
        if self.failure is None:
            return ParseFailure("expected expression", self.annotated(0))
        position, kind = self.failure[:2]
        character = self.at(position)
        if kind == EXPECTED_CLOSING:
            opening, expected = self.failure[2:]
            if character is None:
                reason = (
                    "unexpected end of string, "
                    "expected %s corresponding to %s" % (
                        expected, opening.lexeme
                    )
                )
            else:
                reason = "expected %s corresponding to %s, got %s" % (
                    expected, opening.lexeme, character
                )
            return UnmatchedOpen(
                reason,
                self.annotated_range(opening.span.start, position),
                opening,
                expected
            )
        elif kind == EXPECTED_END:
            if character in closings:
                reason = "found unmatched %s" % character
            else:
                reason = "found unexpected %s" % character
            return ParseFailure(reason, self.annotated(position))
        if character is None:
            reason = "unexpected end of string, expected expression"
        else:
            reason = "expected expression, got %s" % character
        return ParseFailure(reason, self.annotated(position))


class Alternatives(object):
    """
    Replays the alternatives of a rule at a position, pulling them from
    `source` only the first time they are asked for.
    """
    def __init__(self, source):
        self.source = source
        self.seen = []
        self.exhausted = False

    def __iter__(self):
        index = 0
        while True:
            while index < len(self.seen):
                yield self.seen[index]
                index += 1
            if self.exhausted:
                return
            for alternative in self.source:
                self.seen.append(alternative)
                break
            else:
                self.exhausted = True


@contextmanager
def recursion_limit(frames):
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(max(previous, min(previous + frames, MAX_RECURSION_LIMIT)))
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class ParseResult(object):
    succeeded = False

    def __bool__(self):
        return self.succeeded


class Success(ParseResult):
    succeeded = True

    def __init__(self, string, tree, matches):
        self.string = string
        self.tree = tree
        self.matches = matches

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return (
                self.string == other.string and
                self.tree == other.tree and
                self.matches == other.matches
            )
        return NotImplemented

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __repr__(self):
        return "%s(%r, %r, %r)" % (
            self.__class__.__name__,
            self.string,
            self.tree,
            self.matches
        )


class Failure(ParseResult):
    def __init__(self, string, error):
        self.matches = []
        self.string = string
        self.error = error

    def raise_error(self):
        raise self.error

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return (
                self.string == other.string and
                type(self.error) is type(other.error) and
                self.error.reason == other.error.reason and
                self.error.annotation == other.error.annotation
            )
        return NotImplemented

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __repr__(self):
        return "%s(%r, %r)" % (
            self.__class__.__name__,
            self.string,
            self.error
        )


class Grammar(object):
    """
    Parses strings with the braces of `table`. Without a table the one
    selected by `options.strategy` is used, an explicit table takes
    precedence over the strategy.
    """
    def __init__(self, table=None, options=DEFAULT_OPTIONS):
        self.table = options.make_table() if table is None else table
        self.options = options

    def parse(self, string):
        log.debug("parsing %r with %r", string, self.table)
        input = Input(string)
        try:
            with recursion_limit(FRAMES_PER_CHARACTER * len(string)):
                result = self.parse_input(input)
        except RecursionError:
            result = Failure(
                string, ParseFailure("nesting too deep", input.annotated(0))
            )
        if result:
            log.debug("parsed %r, %d braced", string, len(result.matches))
        else:
            log.debug("failed to parse %r: %s", string, result.error.reason)
        return result

    def parse_input(self, input):
        for expression, end in self.parse_expression(input, 0):
            end = self.skip_whitespace(input, end)
            if end == len(input):
                return Success(
                    input.string, expression, input.collector.results()
                )
            input.fail(end, EXPECTED_END)
        return Failure(input.string, input.error(self.table.closings))

    def skip_whitespace(self, input, position):
        if not self.options.significant_whitespace:
            while position < len(input) and input.string[position].isspace():
                position += 1
        return position

    def parse_expression(self, input, position):
        position = self.skip_whitespace(input, position)
        for operand, end in self.parse_operand(input, position):
            for terms, end in self.parse_operations(input, end):
                yield Expression([operand] + terms), end

    def parse_operations(self, input, position):
        start = self.skip_whitespace(input, position)
        character = input.at(start)
        if character is not None and character in self.options.operators:
            operator = Operator(Token.at(character, start))
            operand_start = self.skip_whitespace(input, start + 1)
            for operand, end in self.parse_operand(input, operand_start):
                for terms, end in self.parse_operations(input, end):
                    yield [operator, operand] + terms, end
        yield [], position

    def parse_operand(self, input, position):
        found = False
        for braced, end in self.parse_braced(input, position):
            found = True
            yield braced, end
        for node_cls, predicate in [(Letters, str.isalpha), (Digits, str.isdecimal)]:
            end = position
            while end < len(input) and predicate(input.string[end]):
                end += 1
            for stop in range(end, position, -1):
                found = True
                yield node_cls(Token.at(input.string[position:stop], position)), stop
        if not found:
            input.fail(position, EXPECTED_EXPRESSION)

    def parse_braced(self, input, position):
        alternatives = input.alternatives.get(position)
        if alternatives is None:
            alternatives = input.alternatives[position] = Alternatives(
                self.find_braced(input, position)
            )
        return iter(alternatives)

    def find_braced(self, input, position):
        for lexeme in self.table.openings_at(input.string, position):
            try:
                expected = self.table.closing_for(lexeme)
            except NotFound:
                continue
            opening = Token.at(lexeme, position)
            for expression, end in self.parse_expression(input, opening.span.end):
                end = self.skip_whitespace(input, end)
                if not input.string.startswith(expected, end):
                    input.fail(end, EXPECTED_CLOSING, opening, expected)
                    continue
                braced = Braced(opening, expression, Token.at(expected, end))
                input.collector.record(BracedMatch(braced, input.string))
                yield braced, braced.span.end


def parse_braced_subexpressions(string, table=None, options=DEFAULT_OPTIONS):
    """
    Parses `string` and collects the braced expressions in it. `table`
    overrides the brace table `options.strategy` would pick.
    """
    return Grammar(table, options).parse(string)


def parse(string, table=DEFAULT_TABLE):
    return Grammar(table, DEFAULT_OPTIONS).parse(string)
