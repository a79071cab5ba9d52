#!/usr/bin/env python3
"""pmr CLI entrypoint."""

import sys
import argparse
import logging
from pathlib import Path

from pmreview.lib.config import ConfigError, load_api_config
from pmreview.commands import approve as cmd_approve_module
from pmreview.commands import edit as cmd_edit_module
from pmreview.commands import generate as cmd_generate_module
from pmreview.commands import health as cmd_health_module
from pmreview.commands import list as cmd_list_module
from pmreview.commands import show as cmd_show_module
from pmreview.commands import watch as cmd_watch_module


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr; DEBUG with -v, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # httpx logs every request at INFO; keep it quiet unless debugging
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def get_api_config(args):
    """Load ApiConfig from --env-file / environment or exit with a config error."""
    env_file = Path(args.env_file) if args.env_file else None
    try:
        return load_api_config(env_file)
    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(2)


def cmd_health(args):
    return cmd_health_module.cmd_health(args, get_api_config(args))


def cmd_list(args):
    return cmd_list_module.cmd_list(args, get_api_config(args))


def cmd_show(args):
    return cmd_show_module.cmd_show(args, get_api_config(args))


def cmd_edit(args):
    return cmd_edit_module.cmd_edit(args, get_api_config(args))


def cmd_approve(args):
    return cmd_approve_module.cmd_approve(args, get_api_config(args))


def cmd_reject(args):
    return cmd_approve_module.cmd_reject(args, get_api_config(args))


def cmd_generate(args):
    return cmd_generate_module.cmd_generate(args, get_api_config(args))


def cmd_watch(args):
    return cmd_watch_module.cmd_watch(args, get_api_config(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='pmr', description='PM review workflow CLI')
    parser.add_argument('--env-file', '-e', help='Config env file (default: ~/.config/pmreview/pmreview.env)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging to stderr')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # pmr health
    p_health = subparsers.add_parser('health', help='Check API connectivity')
    p_health.set_defaults(func=cmd_health)

    # pmr list
    p_list = subparsers.add_parser('list', help='List reviews')
    p_list.add_argument('--status', '-s', choices=['pending', 'approved', 'rejected', 'created'],
                        help='Only show reviews with this status')
    p_list.set_defaults(func=cmd_list)

    # pmr show
    p_show = subparsers.add_parser('show', help='Show review details and content')
    p_show.add_argument('id', help='Review ID')
    p_show.add_argument('--json', action='store_true', help='Print the editable JSON content only')
    p_show.set_defaults(func=cmd_show)

    # pmr edit
    p_edit = subparsers.add_parser('edit', help='Edit review content JSON')
    p_edit.add_argument('id', help='Review ID')
    p_edit.add_argument('--file', '-f', help='Read edited JSON from file instead of $EDITOR')
    p_edit.set_defaults(func=cmd_edit)

    # pmr approve
    p_approve = subparsers.add_parser('approve', help='Approve review and create Jira tickets')
    p_approve.add_argument('id', help='Review ID')
    p_approve.set_defaults(func=cmd_approve)

    # pmr reject
    p_reject = subparsers.add_parser('reject', help='Reject review')
    p_reject.add_argument('id', help='Review ID')
    p_reject.add_argument('--reason', '-r', help='Reason for rejection')
    p_reject.set_defaults(func=cmd_reject)

    # pmr generate
    p_generate = subparsers.add_parser('generate', help='Submit content for manual generation')
    p_generate.add_argument('text', help="Input text ('-' reads stdin)")
    p_generate.add_argument('--context', '-c', help='Additional context for the generator')
    p_generate.set_defaults(func=cmd_generate)

    # pmr watch
    p_watch = subparsers.add_parser('watch', help='Interactive review dashboard')
    p_watch.set_defaults(func=cmd_watch)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
