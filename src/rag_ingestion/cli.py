"""Command-line entry point.

Serve the API::

    rag-ingest serve --port 8080

Ingest local text / JSON files::

    rag-ingest ingest notes.txt faq.json
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from rag_ingestion.config import settings
from rag_ingestion.errors import IngestionError
from rag_ingestion.models import InlineFile

logger = logging.getLogger("rag_ingestion")


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("rag_ingestion.serving.app:app", host=args.host, port=args.port)
    return 0


def _ingest(args: argparse.Namespace) -> int:
    from rag_ingestion.ingestion.pipeline import IngestionPipeline

    if args.collection:
        settings.collection_name = args.collection

    files = []
    for raw in args.paths:
        path = Path(raw)
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.error("Cannot read %s: %s", path, exc)
            return 1
        files.append(InlineFile(name=path.name, content=content))

    try:
        pipeline = IngestionPipeline.from_settings(settings, with_storage=False)
        report = pipeline.ingest_inline_files(files)
    except IngestionError as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Stored %d chunks from %d file(s)", report.total_chunks, len(report.processed))
    print(json.dumps(report.model_dump(mode="json"), indent=2))
    return 0 if not report.failed else 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rag-ingest", description="RAG document ingestion")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the ingestion API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8080)
    serve.set_defaults(func=_serve)

    ingest = sub.add_parser("ingest", help="Ingest local text / JSON files")
    ingest.add_argument("paths", nargs="+", help="Files to ingest")
    ingest.add_argument("--collection", default="", help="Override the target collection")
    ingest.set_defaults(func=_ingest)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
