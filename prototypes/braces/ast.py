"""
    braces.ast
    ~~~~~~~~~~

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD, see LICENSE.rst
"""
from braces.tokens import Span


class Node(object):
    @property
    def span(self):
        raise NotImplementedError()

    @property
    def children(self):
        return []

    def text(self, string):
        return string[self.span.start:self.span.end]

    def iter_braced(self):
        """
        Yields the :class:`Braced` nodes of the tree, innermost first.
        """
        for child in self.children:
            for braced in child.iter_braced():
                yield braced

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return self.children == other.children
        return NotImplemented

    def __ne__(self, other):
        return not self == other

    __hash__ = NotImplemented


class Leaf(Node):
    def __init__(self, token):
        self.token = token

    @property
    def span(self):
        return self.token.span

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return self.token == other.token
        return NotImplemented

    def __hash__(self):
        return hash(self.token)

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.token)


class Letters(Leaf):
    pass


class Digits(Leaf):
    pass


class Operator(Leaf):
    pass


class Expression(Node):
    """
    Operands joined by operators, `terms` alternates between the two and
    starts and ends with an operand.
    """
    def __init__(self, terms):
        self.terms = list(terms)

    @property
    def span(self):
        return Span(self.terms[0].span.start, self.terms[-1].span.end)

    @property
    def children(self):
        return self.terms

    def __hash__(self):
        return hash(tuple(self.terms))

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.terms)


class Braced(Node):
    def __init__(self, opening, expression, closing):
        self.opening = opening
        self.expression = expression
        self.closing = closing

    @property
    def span(self):
        return Span(self.opening.span.start, self.closing.span.end)

    @property
    def children(self):
        return [self.expression]

    def iter_braced(self):
        for braced in Node.iter_braced(self):
            yield braced
        yield self

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return (
                self.opening == other.opening and
                self.expression == other.expression and
                self.closing == other.closing
            )
        return NotImplemented

    def __hash__(self):
        return hash(self.opening) ^ hash(self.expression) ^ hash(self.closing)

    def __repr__(self):
        return "%s(%r, %r, %r)" % (
            self.__class__.__name__,
            self.opening,
            self.expression,
            self.closing
        )
