"""
    braces.tokens
    ~~~~~~~~~~~~~

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD, see LICENSE.rst
"""
from collections import namedtuple


Span = namedtuple("Span", ["start", "end"])


class Token(object):
    def __init__(self, lexeme, span):
        self.lexeme = lexeme
        self.span = span

    @classmethod
    def at(cls, lexeme, start):
        return cls(lexeme, Span(start, start + len(lexeme)))

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return self.lexeme == other.lexeme and self.span == other.span
        return NotImplemented

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.lexeme) ^ hash(self.span)

    def __repr__(self):
        return "%s(%r, %r)" % (self.__class__.__name__, self.lexeme, self.span)
