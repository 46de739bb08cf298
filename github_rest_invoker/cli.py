"""CLI commands for the GitHub REST invoker."""

import argparse
import dataclasses
import json
import sys


def _progress(page: int, total: int):
    sys.stderr.write(f"\033[2K\r  [{page}/{total}] pages")
    sys.stderr.flush()


def _to_json(value):
    if dataclasses.is_dataclass(value) and hasattr(value, "data"):
        return value.data
    if isinstance(value, list):
        return [_to_json(v) for v in value]
    return value


def _dump(value):
    if isinstance(value, str):
        sys.stdout.write(value)
        if not value.endswith("\n"):
            sys.stdout.write("\n")
        return
    json.dump(_to_json(value), sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def _parse_value(raw: str):
    """Config values are given as JSON when they parse, plain strings otherwise."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Call the GitHub REST API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--token",
        default=None,
        help="Access token for this call (default: stored token or GITHUB_TOKEN)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # api subcommand
    api_parser = subparsers.add_parser(
        "api",
        help="Make a generic GitHub REST API call",
    )
    api_parser.add_argument(
        "endpoint",
        help="API endpoint path (e.g., repos/owner/repo/assignees)",
    )
    api_parser.add_argument(
        "--method",
        default="GET",
        help="HTTP method (default: GET)",
    )
    api_parser.add_argument(
        "--body",
        default=None,
        help="JSON request body (non-GET methods only)",
    )
    api_parser.add_argument(
        "--accept",
        default=None,
        help="Accept media type override",
    )
    api_parser.add_argument(
        "--paginate",
        action="store_true",
        help="Follow Link rel=next pages and concatenate the results",
    )

    subparsers.add_parser("rate-limit", help="Show the current API rate limits")

    markdown_parser = subparsers.add_parser("markdown", help="Render Markdown to HTML")
    markdown_parser.add_argument(
        "file",
        type=argparse.FileType("r", encoding="utf-8"),
        help="Markdown file, or - for stdin",
    )
    markdown_parser.add_argument(
        "--mode",
        choices=["markdown", "gfm"],
        default="markdown",
        help="Rendering mode (default: markdown)",
    )
    markdown_parser.add_argument(
        "--context",
        default=None,
        metavar="OWNER/REPO",
        help="Repository used to resolve gfm references",
    )

    license_parser = subparsers.add_parser("license", help="List licenses, or show one")
    license_parser.add_argument("key", nargs="?", default=None, help="License key (e.g., mit)")

    gitignore_parser = subparsers.add_parser("gitignore", help="List gitignore templates, or show one")
    gitignore_parser.add_argument("name", nargs="?", default=None, help="Template name (e.g., Python)")

    config_parser = subparsers.add_parser("config", help="Read or change configuration")
    config_sub = config_parser.add_subparsers(dest="config_command")
    get_parser = config_sub.add_parser("get", help="Show one setting, or all")
    get_parser.add_argument("name", nargs="?", default=None)
    set_parser = config_sub.add_parser("set", help="Change a setting")
    set_parser.add_argument("name")
    set_parser.add_argument("value", help="New value (parsed as JSON when possible)")
    set_parser.add_argument(
        "--session-only",
        action="store_true",
        help="Do not persist the change",
    )
    reset_parser = config_sub.add_parser("reset", help="Restore default settings")
    reset_parser.add_argument(
        "--session-only",
        action="store_true",
        help="Keep the config file; only drop this session's changes",
    )

    token_parser = subparsers.add_parser("token", help="Manage the stored access token")
    token_sub = token_parser.add_subparsers(dest="token_command")
    token_set_parser = token_sub.add_parser("set", help="Store an access token (encrypted at rest)")
    token_set_parser.add_argument("value", help="Access token, or - to read it from stdin")
    token_set_parser.add_argument("--session-only", action="store_true", help="Do not persist the token")
    token_clear_parser = token_sub.add_parser("clear", help="Forget the stored access token")
    token_clear_parser.add_argument(
        "--session-only",
        action="store_true",
        help="Keep the token file; only drop the cached token",
    )
    token_sub.add_parser("status", help="Report whether an access token is available")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    from .errors import ApiError

    try:
        return _run(parser, args)
    except ApiError as e:
        sys.stderr.write(f"{e.message}\n")
        return 1
    except (KeyError, ValueError) as e:
        sys.stderr.write(f"{e}\n")
        return 2


def _run(parser, args):
    if args.command == "api":
        from .models import RequestDescriptor
        from .requester import invoke

        headers = {"Accept": args.accept} if args.accept else {}
        descriptor = RequestDescriptor(
            method=args.method,
            uri_fragment=args.endpoint,
            body=args.body,
            headers=headers,
            accept_pagination=args.paginate,
        )
        result = invoke(descriptor, args.token, on_progress=_progress)
        if args.paginate:
            sys.stderr.write("\n")
        _dump(result)
    elif args.command == "rate-limit":
        from .commands import get_rate_limit

        _dump(get_rate_limit(access_token=args.token))
    elif args.command == "markdown":
        from .commands import render_markdown

        with args.file:
            text = args.file.read()
        _dump(render_markdown(text, mode=args.mode, context_repository=args.context, access_token=args.token))
    elif args.command == "license":
        from .commands import get_license, get_licenses

        if args.key:
            _dump(get_license(args.key, access_token=args.token))
        else:
            _dump(get_licenses(access_token=args.token))
    elif args.command == "gitignore":
        from .commands import get_gitignore_template, get_gitignore_templates

        if args.name:
            _dump(get_gitignore_template(args.name, raw=True, access_token=args.token))
        else:
            _dump(get_gitignore_templates(access_token=args.token))
    elif args.command == "config":
        from .context import get_config, get_context, reset_config, set_config

        if args.config_command == "get":
            if args.name:
                _dump(get_config(args.name))
            else:
                _dump(get_context().settings.model_dump(mode="json", exclude={"github_token"}))
        elif args.config_command == "set":
            set_config(args.name, _parse_value(args.value), session_only=args.session_only)
        elif args.config_command == "reset":
            reset_config(session_only=args.session_only)
        else:
            parser.parse_args(["config", "--help"])
    elif args.command == "token":
        from .context import clear_access_token, has_access_token, set_access_token

        if args.token_command == "set":
            value = sys.stdin.readline().strip() if args.value == "-" else args.value
            set_access_token(value, session_only=args.session_only)
        elif args.token_command == "clear":
            clear_access_token(session_only=args.session_only)
        elif args.token_command == "status":
            _dump("configured" if has_access_token() else "not configured")
        else:
            parser.parse_args(["token", "--help"])
    else:
        parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
