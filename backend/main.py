#!/usr/bin/env python3
"""
imgurproxy entry point

Usage:
    python main.py                          # listen on localhost:8080, mounted at /
    python main.py -host :9000 -prefix img  # all interfaces, mounted at /img/

Environment:
    IMGUR_PROXY_HOST, IMGUR_PROXY_PREFIX, IMGUR_PROXY_CACHE_SIZE,
    IMGUR_PROXY_IMAGE_SIZE_LIMIT (flags take precedence)
"""

import argparse
import logging
import sys

import uvicorn

from imgur_proxy import ProxySettings, create_app
from imgur_proxy.config import split_host

logger = logging.getLogger("imgurproxy")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgurproxy",
        description="Caching reverse proxy for imgur images and galleries.",
        add_help=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="show this help.")
    parser.add_argument("-host", "--host", default=None, help="listening port and hostname (default localhost:8080).")
    parser.add_argument(
        "-prefix", "--prefix", default=None,
        help="URL prefix for which the server runs (as in http://foo:8080/prefix).",
    )
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    # -h exits 2, like any other usage error
    if args.help:
        parser.print_help(sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = ProxySettings.from_env(host=args.host, prefix=args.prefix)
        bind_host, bind_port = split_host(settings.host)
    except ValueError as e:
        parser.print_usage(sys.stderr)
        logger.error(f"Invalid configuration: {e}")
        return 2

    app = create_app(settings)
    logger.info(f"Listening on {bind_host}:{bind_port}")
    # uvicorn exits the process if the address cannot be bound
    uvicorn.run(app, host=bind_host, port=bind_port, log_level="info")
    return 0


if __name__ == "__main__":
    sys.exit(main())
