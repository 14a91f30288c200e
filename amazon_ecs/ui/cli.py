from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List

from ..apis.product_search import ProductSearch
from ..config import SearchConfig
from ..errors import ProductSearchError
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Amazon ECS item search CLI")
    p.add_argument("keywords", nargs="*", help="Search keywords (joined with spaces)")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--index", type=str, default=None, help="Search index, e.g. Books, DVD (default from config)")
    p.add_argument("--region", type=str, default=None, help="Endpoint region: com, co.uk, de, fr, ... (default from config)")
    p.add_argument("--raw", action="store_true", help="Print the raw response body instead of parsed XML")
    p.add_argument("--full", action="store_true", help="Print the whole response document, not only the Items node")
    p.add_argument("--param", action="append", default=[], metavar="KEY=VALUE",
                   help="Extra request parameter (repeatable); bypasses the Keywords/SearchIndex shortcut")
    p.add_argument("--operation", type=str, default=None, help="Operation name (default ItemSearch)")
    p.add_argument("--response-group", type=str, default=None, help="Response group (default Large)")
    p.add_argument("--api-version", type=str, default=None, help="API version (default 2009-03-31)")
    p.add_argument("--dry-run", action="store_true", help="Print the signed URL without sending it")
    p.add_argument("--output", type=str, default=None, help="Write the result to this file instead of stdout")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--serve", action="store_true", help="Run the REST API server instead of a single search")
    p.add_argument("--host", type=str, default="127.0.0.1", help="API host (when --serve)")
    p.add_argument("--port", type=int, default=8000, help="API port (when --serve)")
    return p


def _parse_params(pairs: List[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"--param expects KEY=VALUE, got {pair!r}")
        params[key] = value
    return params


def _load_config(args: argparse.Namespace) -> SearchConfig:
    if args.config:
        cfg = SearchConfig.from_file(args.config)
    else:
        cfg = SearchConfig.from_env()

    if args.index:
        cfg.search_index = args.index
    if args.region:
        cfg.region = args.region
    if args.operation:
        cfg.operation = args.operation
    if args.response_group:
        cfg.response_group = args.response_group
    if args.api_version:
        cfg.api_version = args.api_version

    cfg.validate()
    return cfg


def _render(result: object) -> bytes:
    if result is None:
        return b""
    if isinstance(result, bytes):
        return result
    # BeautifulSoup documents and tags serialise through str().
    return str(result).encode("utf-8")


def _write(data: bytes, output: str | None) -> None:
    if output:
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        Path(output).write_bytes(data)
        return
    sys.stdout.buffer.write(data)
    if not data.endswith(b"\n"):
        sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()


def run_server(host: str, port: int) -> None:
    try:
        import uvicorn  # type: ignore
    except Exception as exc:  # pragma: no cover - optional dep
        raise SystemExit("To run the API, install dependencies: pip install 'amazon-ecs[api]'") from exc
    uvicorn.run("amazon_ecs.apis.app:app", host=host, port=port)


def run_cli(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.serve:
        run_server(args.host, args.port)
        return 0

    if not args.keywords and not args.param:
        parser.error("provide search keywords or at least one --param")

    try:
        cfg = _load_config(args)
        extra = _parse_params(args.param)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    client = ProductSearch.from_config(cfg)
    if args.keywords:
        extra.setdefault("Keywords", " ".join(args.keywords))
        extra.setdefault("SearchIndex", cfg.search_index)

    if args.dry_run:
        _write(client.prepare(extra).url.encode("utf-8"), args.output)
        return 0

    try:
        query = client.build_parameters(extra)
        result = client.output(query, raw=args.raw, items_only=not args.full)
    except ProductSearchError as exc:
        logger.error("Search failed: %s", exc)
        return 1

    _write(_render(result), args.output)
    logger.info("Region: %s | Raw: %s | Output: %s", cfg.region, args.raw, args.output or "stdout")
    return 0
