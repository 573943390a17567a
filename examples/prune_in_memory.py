#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging

from laakhay.prune import (
    ChunkedDeleteOrchestrator,
    InMemoryProgressSink,
    InMemoryStoreConfig,
    InMemoryTreeStore,
    Internal,
    Leaf,
    LoggingProgressSink,
    ProgressEventType,
    PruneConfig,
)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Prune a synthetic tree held in memory")
    p.add_argument("width", nargs="?", type=int, default=50, help="children per internal node")
    p.add_argument("depth", nargs="?", type=int, default=3, help="levels of internal nodes")
    p.add_argument("limit", nargs="?", type=int, default=40, help="write size limit per delete")
    p.add_argument("--concurrency", type=int, default=16)
    p.add_argument("--page-size", type=int, default=20)
    p.add_argument("--latency", type=float, default=0.001)
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args()


def build_tree(width: int, depth: int) -> Internal | Leaf:
    if depth == 0:
        return Leaf(1)
    return Internal({f"n{i:04d}": build_tree(width, depth - 1) for i in range(width)})


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    store = InMemoryTreeStore(
        build_tree(args.width, args.depth),
        InMemoryStoreConfig(latency=args.latency, write_size_limit=args.limit),
    )
    config = PruneConfig(max_concurrency=args.concurrency, page_size=args.page_size)
    progress = InMemoryProgressSink()
    sinks = [progress, LoggingProgressSink()] if args.verbose else [progress]

    print(f"Tree size  : {store.size_of('/')}")
    result = await ChunkedDeleteOrchestrator(store, store, config, sinks=sinks).run("/")

    print("=" * 45)
    print(f"Status     : {result.status.value}")
    print(f"Deleted    : {len(result.deleted)} paths")
    print(f"Fanned out : {len(result.fanned_out)} paths")
    print(f"Failed     : {len(result.failed)} paths")
    print(f"Deletes    : {result.stats.delete_calls}")
    print(f"Listings   : {result.stats.list_calls}")
    print(f"Peak calls : {result.stats.peak_in_flight}")
    print(f"Elapsed    : {result.stats.elapsed_seconds:.3f}s")
    print(f"Events     : {len(progress.of_type(ProgressEventType.PATH_STARTED))} started")
    print(f"Remaining  : {store.size_of('/')}")
    print("=" * 45)


if __name__ == "__main__":
    asyncio.run(main())
