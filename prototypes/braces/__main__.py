import sys
import logging
import unittest

from braces.grammar import Options, parse_braced_subexpressions
from braces.report import report, report_failure

from docopt import docopt


log = logging.getLogger("braces")


def main(argv=sys.argv):
    """
    Usage:
      braces match [options] <expression>...
      braces test [<args>...]
      braces -h | --help

    Options:
      -h --help             Show this.
      -m --mirror           Guess closing braces by mirroring the opening ones.
      -o --operators=<ops>  Infix operator characters [default: +-*/].
      -w --whitespace       Treat whitespace as significant.
      -e --explain          Explain why an expression failed to parse.
      -v --verbose          Log parser activity.
    """
    arguments = docopt(main.__doc__, argv[1:], help=True)
    if arguments["test"]:
        import braces.tests
        unittest.main(
            module=braces.tests,
            argv=argv[0:1] + arguments["<args>"],
            buffer=True
        )
    elif arguments["match"]:
        return match(arguments)


def match(arguments):
    stream_handler = logging.StreamHandler(stream=sys.stdout)
    log.handlers = [stream_handler]
    log.setLevel(logging.DEBUG if arguments["--verbose"] else logging.WARNING)

    try:
        options = Options(
            operators=arguments["--operators"],
            significant_whitespace=arguments["--whitespace"],
            strategy="mirror" if arguments["--mirror"] else "static"
        )
    except ValueError as error:
        sys.exit(str(error))

    status = 0
    for expression in arguments["<expression>"]:
        result = parse_braced_subexpressions(expression, options=options)
        for line in report(result):
            print(line)
        if not result:
            status = 1
            if arguments["--explain"]:
                print(report_failure(result))
    return status


if __name__ == "__main__":
    sys.exit(main())
