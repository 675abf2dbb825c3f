import sys
import argparse
import logging

from typing import List, Optional


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='gherkin-steps-ls')

    parser.add_argument(
        '--socket',
        action='store_true',
        required=False,
        default=False,
        help='run server in socket mode',
    )

    parser.add_argument(
        '--socket-port',
        type=int,
        default=4444,
        required=False,
        help='port the language server should listen on',
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        required=False,
        default=False,
        help='verbose output from server',
    )

    parser.add_argument(
        '--no-verbose',
        nargs='+',
        type=str,
        default=None,
        help='name of loggers to disable',
    )

    parser.add_argument(
        '--version',
        action='store_true',
        required=False,
        default=False,
        help='print version and exit',
    )

    subparsers = parser.add_subparsers(dest='command')

    lint_parser = subparsers.add_parser('lint', help='report steps in feature files that has no step definition')
    lint_parser.add_argument(
        '--steps',
        action='append',
        type=str,
        default=None,
        help='glob, relative to current directory, of step definition files (can be repeated)',
    )
    lint_parser.add_argument(
        'files',
        nargs='+',
        type=str,
        help='feature files, or directories with feature files, to lint ("." for all in current directory)',
    )

    args = parser.parse_args(argv)

    if args.version:
        from gherkin_steps_ls import __version__

        print(__version__, file=sys.stderr)

        raise SystemExit(0)

    return args


def setup_logging(args: argparse.Namespace) -> None:
    handlers: List[logging.Handler] = []
    level = logging.INFO if not args.verbose else logging.DEBUG

    if args.command == 'lint':
        handlers = [logging.StreamHandler(sys.stderr)]
        level = logging.WARNING if not args.verbose else logging.DEBUG
    elif not args.socket:
        # stdout belongs to the protocol
        if level < logging.INFO:
            handlers = [logging.FileHandler('gherkin-steps-ls.log')]
        else:
            handlers = [logging.NullHandler()]
    else:
        handlers = [logging.StreamHandler(sys.stderr)]

    logging.basicConfig(
        level=level,
        format='[%(asctime)s] %(levelname)s: %(message)s',
        handlers=handlers,
    )

    no_verbose: List[str] = args.no_verbose or []

    for logger_name in no_verbose:
        if logger_name in logging.Logger.manager.loggerDict:
            logger = logging.getLogger(logger_name)
            logger.setLevel(logging.ERROR)
        else:
            print(f'!! logger "{logger_name}" does not exist', file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)

    setup_logging(args)

    if args.command == 'lint':
        from gherkin_steps_ls.cli import cli

        return cli(args)

    from gherkin_steps_ls.server import server

    if not args.socket:
        server.start_io(sys.stdin.buffer, sys.stdout.buffer)  # type: ignore
    else:
        server.start_tcp('127.0.0.1', args.socket_port)  # type: ignore

    return 0


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())
