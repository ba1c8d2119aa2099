"""
    braces
    ~~~~~~

    This is a prototype for a recursive grammar matching nested braces. The
    goal of this prototype is to find out how far plain recursive descent
    with backtracking gets us when the closing brace is not known in advance
    but computed from the opening one, either by looking it up in a table or
    by mirroring the opening brace character by character.

    Expressions consist of runs of letters and digits joined by infix
    operators, any operand may be a braced expression. Every braced
    expression found along the way is collected and can be reported.

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD, see LICENSE.rst
"""
