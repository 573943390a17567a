#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from laakhay.prune import (
    LoggingProgressSink,
    PruneConfig,
    RestStoreSettings,
    RestTreeStore,
    prune,
)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Delete a path from a JSON tree REST API")
    p.add_argument("base_url", help="e.g. https://my-db.example.com")
    p.add_argument("path", help="path to delete, e.g. /users/inactive")
    p.add_argument("--write-size-limit", default="tiny")
    p.add_argument("--token", default=os.environ.get("TREE_STORE_TOKEN"))
    return p.parse_args()


async def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO)

    settings = RestStoreSettings(
        base_url=args.base_url,
        write_size_limit=args.write_size_limit,
        auth_token=args.token,
    )
    # Tuning comes from LAAKHAY_PRUNE_* environment variables.
    config = PruneConfig.from_env()

    async with RestTreeStore(settings) as store:
        result = await prune(store, args.path, config, sinks=[LoggingProgressSink()])

    print(f"{result.status.value}: {len(result.deleted)} deleted, {len(result.failed)} failed")
    for path, reason in sorted(result.failed.items()):
        print(f"  {path}: {reason}")
    return 0 if result.succeeded else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
