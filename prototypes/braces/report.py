"""
    braces.report
    ~~~~~~~~~~~~~

    :copyright: 2012 by Daniel Neuhäuser
    :license: BSD, see LICENSE.rst
"""


def format_match(match):
    return "Braces: %s * %s ||| Subexpr: %s" % (
        match.opening.lexeme,
        match.closing.lexeme,
        match.inner
    )


def report(result):
    """
    Yields a line for every braced expression in `result` or ``FAILED`` if
    the parse failed.
    """
    if not result:
        yield "FAILED"
        return
    for match in result.matches:
        yield format_match(match)


def report_failure(result):
    return str(result.error)
