import logging
import sys

from codebase_rag.config.settings import settings
from codebase_rag.container import configure_container, container
from codebase_rag.core.exceptions import VectorStoreUnavailableError
from codebase_rag.core.protocols.reporter import IngestionReporterProtocol
from codebase_rag.core.services.ingest_service import IngestService
from codebase_rag.core.services.query_service import QueryService

logging.basicConfig(level=settings.log_level.upper(), format="%(message)s")
logger = logging.getLogger(__name__)

USAGE = """Usage: codebase-rag <command> [args]

Commands:
  ingest [path] [--force]     Index a source tree (or a single file)
  query <text> [--agent]      Search indexed code
  forget <path>               Remove a deleted file from the index
  logs <view> [session]       Ingestion logs; views: summary, errors,
                              parse-errors, sessions, export
"""


def cmd_ingest(args: list[str]):
    """Ingest command - index changed files."""
    force = "--force" in args
    paths = [a for a in args if not a.startswith("--")]
    source_path = paths[0] if paths else None

    configure_container(settings)
    ingest_service = container.resolve(IngestService)
    result = ingest_service.run(source_path=source_path, force=force)

    print()
    print("Ingestion summary")
    print(f"  Files processed: {result.files_processed}")
    print(f"  Files skipped:   {result.files_skipped}")
    print(f"  Chunks created:  {result.chunks_created}")
    print(f"  Chunks split:    {result.chunks_split}")
    print(f"  Chunks dropped:  {result.chunks_dropped}")
    print(f"  Errors:          {result.errors}")
    print(f"  Duration:        {result.duration_ms / 1000:.2f}s")
    for path in result.failed_files:
        print(f"    failed: {path}")

    if result.errors:
        reporter = container.resolve(IngestionReporterProtocol)
        print(f"\nSee details with: codebase-rag logs errors {reporter.session_id}")


def cmd_query(args: list[str]):
    """Query command - semantic search."""
    agent = "--agent" in args
    text = " ".join(a for a in args if not a.startswith("--"))
    if not text:
        print("Usage: codebase-rag query <text> [--agent]")
        sys.exit(1)

    configure_container(settings)
    query_service = container.resolve(QueryService)
    results = query_service.query(text)

    if agent:
        print(query_service.format_for_agent(results))
    else:
        print(query_service.format_for_human(results))


def cmd_forget(args: list[str]):
    """Forget command - drop a deleted file from cache and store."""
    if not args:
        print("Usage: codebase-rag forget <path>")
        sys.exit(1)

    configure_container(settings)
    ingest_service = container.resolve(IngestService)
    if not ingest_service.forget(args[0]):
        print(f"File was not tracked: {args[0]}")


def cmd_logs(args: list[str]):
    """Logs command - inspect ingestion sessions."""
    view = args[0] if args else "summary"

    configure_container(settings)
    ingestion_logger = container.resolve(IngestionReporterProtocol)

    if view == "sessions":
        sessions = ingestion_logger.sessions()
        if not sessions:
            print("No ingestion sessions recorded.")
        for session_id in sessions:
            print(session_id)
        return

    session_id = args[1] if len(args) > 1 else ingestion_logger.latest_session()
    if session_id is None:
        print("No ingestion sessions recorded.")
        return

    if view == "summary":
        print(f"Session: {session_id}")
        for row in ingestion_logger.session_summary(session_id):
            print(f"  {row['status']:<16} files={row['count']:<6} chunks={row['total_chunks']}")
    elif view == "errors":
        entries = ingestion_logger.errors(session_id)
        print(f"{len(entries)} error(s) in session {session_id}")
        for entry in entries:
            location = f":{entry.line_number}" if entry.line_number else ""
            print(f"  [{entry.status.value}] {entry.relative_path}{location}")
            print(f"      {entry.error_message}")
    elif view == "parse-errors":
        entries = ingestion_logger.parse_errors(session_id)
        print(f"{len(entries)} parse error(s) in session {session_id}")
        for entry in entries:
            print(f"  {entry.relative_path}:{entry.line_number}:{entry.column_number}")
            if entry.error_details:
                print(entry.error_details)
    elif view == "export":
        output = ingestion_logger.export_json(session_id)
        print(f"Exported to {output}")
    else:
        print(f"Unknown logs view: {view}")
        sys.exit(1)


COMMANDS = {
    "ingest": cmd_ingest,
    "query": cmd_query,
    "forget": cmd_forget,
    "logs": cmd_logs,
}


def main():
    """CLI entry point."""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command = sys.argv[1]
    handler = COMMANDS.get(command)
    if handler is None:
        print(f"Unknown command: {command}")
        print(USAGE)
        sys.exit(1)

    try:
        handler(sys.argv[2:])
    except VectorStoreUnavailableError as e:
        logger.error(f"{e}. Is ChromaDB running at {settings.chroma_host}:{settings.chroma_port}?")
        sys.exit(1)


if __name__ == "__main__":
    main()
