"""Administrative commands: ``vector-ingest-admin <command> [args...]``.

Usage:
    vector-ingest-admin init-db
    vector-ingest-admin create-collection
    vector-ingest-admin collection-info
    vector-ingest-admin enqueue ./docs/handbook.pdf
    vector-ingest-admin enqueue ./notes.txt --mime-type text/plain
    vector-ingest-admin check-consistency <file_id>
"""

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from vector_ingest.config import get_settings
from vector_ingest.database import init_models
from vector_ingest.services import document_loader
from vector_ingest.services.container import ServiceContainer
from vector_ingest.utils.errors import IngestionException
from vector_ingest.utils.logging import get_logger, setup_logging

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vector-ingest-admin",
        description="Administrative commands for the vector ingestion pipeline",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    subparsers.add_parser("init-db", help="Create the relational tables (files, queue, chunks)")
    subparsers.add_parser(
        "create-collection", help="Provision the Qdrant collection and its payload indexes"
    )
    subparsers.add_parser("collection-info", help="Print Qdrant collection statistics")

    enqueue_parser = subparsers.add_parser(
        "enqueue", help="Register a local file and queue it for processing"
    )
    enqueue_parser.add_argument("path", type=Path, help="Path to the document")
    enqueue_parser.add_argument(
        "--mime-type",
        default=None,
        help="MIME type of the document (guessed from the extension when omitted)",
    )

    consistency_parser = subparsers.add_parser(
        "check-consistency", help="Compare chunk and vector counts for a file"
    )
    consistency_parser.add_argument("file_id", help="File ID")

    return parser


async def init_db(container: ServiceContainer) -> int:
    await init_models(container.engine)
    print("Database tables created")
    return 0


async def create_collection(container: ServiceContainer) -> int:
    created = await container.vector_store.ensure_collection()
    name = container.vector_store.collection_name
    if created:
        print(f"Collection {name} created (dimension={container.vector_store.dimension})")
    else:
        print(f"Collection {name} already exists")
    return 0


async def collection_info(container: ServiceContainer) -> int:
    info = await container.vector_store.collection_info()
    print(json.dumps(info.model_dump(), indent=2))
    return 0


async def enqueue(container: ServiceContainer, path: Path, mime_type: Optional[str]) -> int:
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    mime_type = mime_type or mimetypes.guess_type(path.name)[0]
    if not mime_type or not document_loader.is_supported(mime_type):
        supported = ", ".join(document_loader.supported_mime_types())
        print(
            f"Error: unsupported MIME type {mime_type!r}. Supported types: {supported}",
            file=sys.stderr,
        )
        return 1

    resolved = path.resolve()
    item = await container.metadata_store.create_file_with_queue_item(
        name=resolved.name,
        url=str(resolved),
        mime_type=mime_type,
        size=resolved.stat().st_size,
    )
    print(json.dumps({"file_id": item.file_id, "queue_id": item.id, "status": item.status}))
    return 0


async def check_consistency(container: ServiceContainer, file_id: str) -> int:
    """Exit code 0 when counts match, 2 on a mismatch."""
    chunks = await container.metadata_store.count_chunks(file_id)
    vectors = await container.vector_store.count_by_file(file_id)
    consistent = chunks == vectors
    print(
        json.dumps(
            {"file_id": file_id, "chunks": chunks, "vectors": vectors, "consistent": consistent}
        )
    )
    if not consistent:
        logger.warning(f"File {file_id} is inconsistent: chunks={chunks}, vectors={vectors}")
        return 2
    return 0


async def run_command(args: argparse.Namespace, container: ServiceContainer) -> int:
    if args.command == "init-db":
        return await init_db(container)
    if args.command == "create-collection":
        return await create_collection(container)
    if args.command == "collection-info":
        return await collection_info(container)
    if args.command == "enqueue":
        return await enqueue(container, args.path, args.mime_type)
    if args.command == "check-consistency":
        return await check_consistency(container, args.file_id)
    return 1


async def _run(args: argparse.Namespace) -> int:
    container = ServiceContainer.build(get_settings())
    try:
        return await run_command(args, container)
    finally:
        await container.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    try:
        return asyncio.run(_run(args))
    except IngestionException as e:
        print(f"Error: {e.message} ({e.code})", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
