from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

from .config import config_sha256, load_config
from .config_schema import AppConfig
from .errors import ConfigError, HtmlImportError, InputError
from .facets import FeedPostConverter
from .html_import import HtmlImporter
from .post import Post
from .run_log import RunLogger
from .split import split_post
from .text_import import TextImporter, network_url_resolver, no_tag_resolver


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skypost")

    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser(
        "build",
        help="Import a document, split it into posts, and print them as JSON lines.",
    )
    build.add_argument(
        "--input",
        required=True,
        help="Path to the input document, or '-' for stdin.",
    )
    build.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file (defaults apply when omitted).",
    )
    build.add_argument(
        "--html",
        action="store_true",
        help="Treat the input as HTML instead of plain text.",
    )
    build.add_argument(
        "--log",
        default=None,
        help="Path of a JSONL run log to write.",
    )
    build.set_defaults(_handler=_cmd_build)

    return parser


def _eprint(message: str) -> None:
    print(message, file=sys.stderr)


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Failed to read input: {source}") from e


def _text_importer(cfg: AppConfig) -> TextImporter:
    return TextImporter(
        url_resolver=network_url_resolver if cfg.text_import.check_url_hosts else None,
        tag_resolver=None if cfg.text_import.resolve_tags else no_tag_resolver,
    )


def import_document(cfg: AppConfig, content: str, *, html: bool) -> Post:
    if html:
        post = HtmlImporter().import_html(content)
    else:
        post = _text_importer(cfg).import_text(content)
    for lang in cfg.output.languages:
        post.add_language(lang)
    return post


def _cmd_build(args: argparse.Namespace) -> int:
    with RunLogger.open(args.log) as log:
        log.info("build_started", input=str(args.input), html=bool(args.html))

        try:
            cfg = load_config(args.config)
            log.info("config_loaded", config_path=args.config, config_sha256=config_sha256(cfg))

            post = import_document(cfg, _read_input(args.input), html=bool(args.html))
            log.info(
                "post_imported",
                blocks=len(post.blocks),
                graphemes=post.grapheme_length(),
                bytes=post.byte_length(),
            )

            parts = split_post(post, cfg.split.to_options())
            log.info("post_split", parts=len(parts), max_length=cfg.split.max_length)

            for feed_post in FeedPostConverter().to_feed_posts(parts):
                print(json.dumps(feed_post.to_json_dict(), ensure_ascii=False, sort_keys=True))

            log.info("build_completed", parts=len(parts))
            return 0
        except Exception as e:
            log.exception("build_failed", exc=e)
            raise


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        handler = getattr(args, "_handler")
        return int(handler(args))
    except ConfigError as e:
        _eprint(str(e))
        return 2
    except (InputError, HtmlImportError) as e:
        _eprint(str(e))
        return 3
    except KeyboardInterrupt:
        _eprint("Interrupted")
        return 130
    except Exception as e:
        _eprint(f"Unexpected error: {e}")
        return 1
