#!/usr/bin/env python3
"""
shortblob server - Main entry point

Usage:
    shortblob-server <port> \
        (--store-dir=<STORE_DIR> | --memory) \
        [--host=<HOST>] \
        [--base-url=<BASE_URL>] \
        [--collision-policy=reject|overwrite] \
        [--legacy-status-codes] \
        [--no-edge-cache] \
        [--max-upload-bytes=<N>] \
        [--log-level=<LEVEL>]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn

from domain.blob_store import BlobStore
from domain.collision_policy import CollisionPolicy
from infrastructure.file_system_blob_store import FileSystemBlobStore
from infrastructure.memory_blob_store import MemoryBlobStore
from interfaces.api import Config, DEFAULT_MAX_UPLOAD_BYTES, create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='shortblob server - Content-addressed blob store',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    # Required arguments
    parser.add_argument('port', type=int, help='Port to listen on')

    # Backing store
    parser.add_argument('--store-dir', help='Directory holding stored blobs')
    parser.add_argument('--memory', action='store_true',
                       help='Keep blobs in process memory (lost on restart)')

    # Optional arguments
    parser.add_argument('--host', default='0.0.0.0',
                       help='Host to bind to (default: 0.0.0.0)')
    parser.add_argument('--base-url',
                       help='Base URL for access links (default: the request URL)')
    parser.add_argument('--collision-policy', default=CollisionPolicy.REJECT.value,
                       choices=[policy.value for policy in CollisionPolicy],
                       help='What to do when an identifier already holds a different blob')
    parser.add_argument('--legacy-status-codes', action='store_true',
                       help='Answer 400 instead of 404 for unknown identifiers')
    parser.add_argument('--no-edge-cache', action='store_true',
                       help='Disable the read-through cache in front of the store')
    parser.add_argument('--max-upload-bytes', type=int, default=DEFAULT_MAX_UPLOAD_BYTES,
                       help=f'Largest accepted upload (default: {DEFAULT_MAX_UPLOAD_BYTES})')
    parser.add_argument('--log-level', default='info',
                       choices=['debug', 'info', 'warning', 'error'],
                       help='Logging level (default: info)')
    return parser


def build_blob_store(store_dir: Optional[str], memory: bool) -> BlobStore:
    if memory:
        return MemoryBlobStore()
    return FileSystemBlobStore(Path(store_dir))


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Validate configuration
    if bool(args.store_dir) == bool(args.memory):
        print("Error: Exactly one of --store-dir or --memory must be provided", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=args.log_level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    config = Config(
        base_url=args.base_url,
        collision_policy=args.collision_policy,
        legacy_status_codes=args.legacy_status_codes,
        edge_cache_enabled=not args.no_edge_cache,
        max_upload_bytes=args.max_upload_bytes
    )
    app = create_app(config, build_blob_store(args.store_dir, args.memory))

    # Run the server
    print(f"Starting shortblob server on {args.host}:{args.port}")
    print(f"Store: {args.store_dir or 'memory'}")
    print(f"Collision policy: {config.collision_policy.value}")
    print(f"Edge cache: {config.edge_cache_enabled}")

    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == '__main__':
    main()
