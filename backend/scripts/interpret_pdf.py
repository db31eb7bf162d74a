#!/usr/bin/env python3
"""
Run the interpretation pipeline on a local PDF.

Prints the canonical record and its validation issues.  With --save the
record is written to Postgres (the `documents` table is created first).

Usage:
    cd backend
    python -m scripts.interpret_pdf <file.pdf> [--backend=NAME] [--user=ID] [--save]
"""

import asyncio
import json
import sys
from pathlib import Path

USAGE = __doc__


async def run(path: Path, backend_name: str | None, user_id: str, save: bool) -> int:
    from award_interpreter.core.config import settings
    from award_interpreter.core.tracing import setup_tracing
    from award_interpreter.pipeline.errors import PipelineError
    from award_interpreter.pipeline.orchestrator import create_pipeline
    from award_interpreter.schemas.document import RawDocument

    setup_tracing(settings)

    store = None
    if save:
        from award_interpreter.db.session import init_models
        from award_interpreter.persistence.sql_store import SqlAlchemyDocumentStore

        await init_models()
        store = SqlAlchemyDocumentStore()

    pipeline = create_pipeline(backend_name, store)
    document = RawDocument(content=path.read_bytes(), filename=path.name, content_type="application/pdf")

    try:
        record, validation = await pipeline.interpret(document, user_id)
    except PipelineError as exc:
        print(f"✗ {path.name}: {exc}")
        return 1

    _print_record(record, validation)

    if save:
        try:
            record_id = await pipeline.persist(record, user_id)
        except PipelineError as exc:
            print(f"✗ Not saved: {exc}")
            return 1
        print(f"✓ Saved as standard {record_id}")
    return 0


def _print_record(record, validation):
    print(f"\n{'─' * 50}")
    print(f"  File         : {record.source_filename}")
    print(f"  Award type   : {record.award_type}")
    print(f"  Title        : {record.title}")
    print(f"  Deadline     : {record.deadline}")
    print(f"  Confidence   : {record.confidence:.2f}")
    print(f"  Score rules  : {len(record.score_rules)}")
    print(f"  Notes        : {record.notes}")

    print("\n  Validation:")
    if not validation.issues:
        print("    ✓ no issues")
    for issue in validation.issues:
        icon = "✗" if issue.severity == "error" else "⚠"
        print(f"    {icon} [{issue.code}] {issue.message}")

    print("\n  Record:")
    payload = record.model_dump(by_alias=True, mode="json", exclude={"source_text", "proposal"})
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    print(f"{'─' * 50}\n")


def main() -> None:
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    opts = [a for a in sys.argv[1:] if a.startswith("--")]
    if len(args) != 1 or "--help" in opts:
        print(USAGE)
        sys.exit(0 if "--help" in opts else 1)

    backend_name = None
    user_id = "system"
    for opt in opts:
        if opt.startswith("--backend="):
            backend_name = opt.split("=", 1)[1]
        elif opt.startswith("--user="):
            user_id = opt.split("=", 1)[1]

    from award_interpreter.core.config import settings
    from award_interpreter.core.logging import setup_logging

    setup_logging(settings.LOG_LEVEL)
    sys.exit(asyncio.run(run(Path(args[0]), backend_name, user_id, save="--save" in opts)))


if __name__ == "__main__":
    main()
