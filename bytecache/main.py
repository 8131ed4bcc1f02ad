#!/usr/bin/env python3
import argparse
import logging
import os
import sys

import trio

from bytecache.api.errors import CacheError, GroupConfigError
from bytecache.api.http_getter import HttpGetter
from bytecache.group.async_group import AsyncGroup
from bytecache.group.group import Group, GroupRegistry
from bytecache.storage.directory_getter import DirectoryGetter

logger = logging.getLogger(__name__)

EXIT_CONFIG = 1
EXIT_LOAD_FAILED = 2


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Fetch keys through a byte-budgeted LRU cache group."
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--source-url",
        default=os.getenv("BYTECACHE_SOURCE_URL", ""),
        help="Load misses from GET <url>/<key>",
    )
    source.add_argument(
        "--source-dir",
        default=os.getenv("BYTECACHE_SOURCE_DIR", ""),
        help="Load misses from files under this directory",
    )
    parser.add_argument("keys", nargs="+", help="Keys to fetch")
    parser.add_argument("--group", default="default", help="Group (namespace) name")
    parser.add_argument(
        "--cache-bytes",
        type=int,
        default=_env_int("BYTECACHE_CACHE_BYTES", 64 * 1024 * 1024),
        help="Cache budget in bytes (0 = unbounded)",
    )
    parser.add_argument(
        "--repeat",
        type=int,
        default=1,
        help="Fetch every key this many times",
    )
    parser.add_argument(
        "--single-flight",
        action="store_true",
        help="Fetch keys concurrently with trio, coalescing loads of the same key",
    )
    parser.add_argument("--debug", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def setup_logging(debug_mode):
    level = logging.DEBUG if debug_mode else logging.INFO
    logging.basicConfig(
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s", level=level
    )
    if not debug_mode:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def build_getter(args):
    if args.source_url:
        return HttpGetter(args.source_url)
    if args.source_dir:
        if not os.path.isdir(args.source_dir):
            logger.critical(f"Source directory does not exist: {args.source_dir}")
            return None
        return DirectoryGetter(args.source_dir)
    logger.critical("Missing source. Either pass --source-url/--source-dir or set BYTECACHE_SOURCE_URL")
    return None


def fetch_all(group: Group, keys, repeat, out=None) -> int:
    if out is None:
        out = sys.stdout
    failures = 0
    for _ in range(repeat):
        for key in keys:
            try:
                value = group.get(key)
            except (CacheError, OSError) as e:
                logger.error(f"{key}: {e}")
                failures += 1
                continue
            print(f"{key}\t{value}", file=out)
    return failures


async def fetch_all_async(group: AsyncGroup, keys, repeat, out=None) -> int:
    if out is None:
        out = sys.stdout
    failures = 0

    async def fetch_one(key):
        nonlocal failures
        try:
            value = await group.get(key)
        except (CacheError, OSError) as e:
            logger.error(f"{key}: {e}")
            failures += 1
            return
        print(f"{key}\t{value}", file=out)

    for _ in range(repeat):
        async with trio.open_nursery() as nursery:
            for key in keys:
                nursery.start_soon(fetch_one, key)
    return failures


def main(argv=None, out=None) -> int:
    args = parse_args(argv)
    setup_logging(args.debug)

    if args.cache_bytes < 0 or args.repeat < 1:
        logger.critical("--cache-bytes must be >= 0 and --repeat must be >= 1")
        return EXIT_CONFIG

    getter = build_getter(args)
    if getter is None:
        return EXIT_CONFIG

    registry = GroupRegistry()
    try:
        group = registry.new_group(args.group, args.cache_bytes, getter)
    except GroupConfigError as e:
        logger.critical(f"Invalid group: {e}")
        return EXIT_CONFIG
    try:
        if args.single_flight:
            failures = trio.run(fetch_all_async, AsyncGroup(group), args.keys, args.repeat, out)
        else:
            failures = fetch_all(group, args.keys, args.repeat, out)
    finally:
        if isinstance(getter, HttpGetter):
            getter.close()

    stats = group.stats()
    logger.info(
        "group=%s gets=%d hits=%d loads=%d load_errors=%d items=%d bytes=%d/%d evictions=%d",
        stats.name, stats.gets, stats.hits, stats.loads, stats.load_errors,
        stats.cache.items, stats.cache.used_bytes, stats.cache.max_bytes, stats.cache.evictions,
    )
    return EXIT_LOAD_FAILED if failures else 0


def cli_entry_point():
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    cli_entry_point()
