"""Command-line interface.

Usage::

    ticket-rag ingest tickets.json            # embed + upsert a JSON export
    ticket-rag ask "Plus não puxa a loja"     # answer from the index
    ticket-rag serve --port 3000              # run the HTTP API
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from ticket_rag.config import Settings, configure_logging
from ticket_rag.errors import TicketRAGError

logger = logging.getLogger(__name__)


def _cmd_ingest(args: argparse.Namespace, settings: Settings) -> int:
    from ticket_rag.ingestion.loader import load_records
    from ticket_rag.services import build_services

    records = load_records(args.path)
    services = build_services(settings)
    result = services.ingestion.ingest(records, args.source)
    print(
        f"Upserted {result.upserted_count} record(s) → index '{result.index_name}' "
        f"(namespace={result.namespace}, model={result.embedding_model})"
    )
    return 0


def _cmd_ask(args: argparse.Namespace, settings: Settings) -> int:
    from ticket_rag.services import build_services

    services = build_services(settings)
    result = services.answering.answer(args.question, args.top_k)
    print(result.answer)
    if args.show_matches:
        print()
        for rank, match in enumerate(result.matches, 1):
            title = match.metadata.get("titulo", "")
            print(f"[{rank}] {match.id} score={match.score:.3f} {title}")
    return 0


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    uvicorn.run("ticket_rag.serving.app:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ticket-rag", description="Support-ticket RAG gateway")
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Embed and upsert tickets from a JSON / JSONL file")
    ingest.add_argument("path", help="JSON array file or JSON-Lines file")
    ingest.add_argument("--source", default="cli:ingest", help="Provenance tag stored with each record")
    ingest.set_defaults(func=_cmd_ingest)

    ask = sub.add_parser("ask", help="Answer a question from the index")
    ask.add_argument("question")
    ask.add_argument("--top-k", type=int, default=None, help="Matches to retrieve (1-30)")
    ask.add_argument("--show-matches", action="store_true", help="Print the retrieved tickets")
    ask.set_defaults(func=_cmd_ask)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=3000)
    serve.set_defaults(func=_cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(settings.log_level)
    try:
        return args.func(args, settings)
    except TicketRAGError as exc:
        logger.error("%s", exc)
        print(json.dumps({"error": type(exc).__name__, "details": str(exc)}), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
