#!/usr/bin/env python3
"""
CLI interface for the episode generation pipeline.

Usage:
    python -m src.pipeline init-db
    python -m src.pipeline submit --transcript-file talk.txt --title "My talk" --summary-length SHORT
    python -m src.pipeline submit --transcript-file talk.txt --mode multi --voice-a Strategist --voice-b Presenter
    python -m src.pipeline run --job-id 0193b1f2-...
    python -m src.pipeline status --job-id 0193b1f2-...

Configuration comes from the environment (and .env): DATABASE_URL, provider
API keys, STORAGE_BACKEND, TTS_CHUNK_WORDS, ... Logs are written to logs/.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from src.db import (
    GenerationMode,
    JobNotFoundError,
    JobStatus,
    JobStore,
    SummaryLength,
    check_database_connection,
    configure_database,
    init_database,
)
from src.logger import setup_logging
from src.tts import VOICE_IDS
from .config import PipelineConfig
from .summary_length import SUMMARY_LENGTH_OPTIONS
from .trigger import GenerateEpisodeRequest
from .worker import EpisodeWorker, build_context


def validate_voice(voice: Optional[str]) -> Optional[str]:
    """
    Validate a voice id against the catalogue (case-insensitive).

    Returns:
        Canonical voice id, or None if ``voice`` is None

    Raises:
        argparse.ArgumentTypeError: On an unknown voice
    """
    if voice is None:
        return None
    for voice_id in VOICE_IDS:
        if voice_id.lower() == voice.lower():
            return voice_id
    raise argparse.ArgumentTypeError(
        f"Unknown voice '{voice}'. Available voices: {', '.join(VOICE_IDS)}"
    )


def read_transcript_file(path: str) -> str:
    transcript_path = Path(path)
    if not transcript_path.is_file():
        raise argparse.ArgumentTypeError(f"Transcript file not found: {path}")
    return transcript_path.read_text(encoding="utf-8")


def add_generation_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mode",
        choices=[m.value for m in GenerationMode],
        help="single narrator or two-host dialogue",
    )
    parser.add_argument(
        "--summary-length",
        type=str.upper,
        choices=[s.value for s in SummaryLength],
        help="Episode length tier (default: MEDIUM)",
    )
    parser.add_argument("--voice-a", type=validate_voice, metavar="VOICE", help="Narrator / host A voice")
    parser.add_argument("--voice-b", type=validate_voice, metavar="VOICE", help="Host B voice (multi mode)")


def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    tiers = "\n".join(
        f"  {tier.value:<8} {config.label}, {config.words[0]}-{config.words[1]} words, "
        f"{config.usage_count} credit(s)"
        for tier, config in SUMMARY_LENGTH_OPTIONS.items()
    )
    parser = argparse.ArgumentParser(
        description="Episode Generation Pipeline - turns a transcript into a narrated audio episode",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Summary length tiers:
{tiers}

Voices:
  {", ".join(VOICE_IDS)}

Notes:
  - Rerunning a job resumes after its last completed step
  - Completed and failed jobs are never rerun
  - Logs written to logs/pipeline.log
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the database tables")

    submit = subparsers.add_parser("submit", help="Create a job from a transcript file and run it")
    submit.add_argument("--transcript-file", required=True, metavar="PATH")
    submit.add_argument("--title", default="Untitled episode")
    submit.add_argument("--user-id", default="cli")
    submit.add_argument("--no-run", action="store_true", help="Only create the PENDING job")
    add_generation_arguments(submit)

    run = subparsers.add_parser("run", help="Run (or resume) the pipeline of an existing job")
    run.add_argument("--job-id", required=True)
    add_generation_arguments(run)

    status = subparsers.add_parser("status", help="Show a job record")
    status.add_argument("--job-id", required=True)

    return parser.parse_args(argv)


def print_job(job) -> None:
    print("=" * 80)
    print(f"Job:        {job.id}")
    print(f"Title:      {job.title}")
    print(f"Status:     {job.status.value}")
    print(f"Progress:   {job.progress_message or '-'}")
    tier = job.summary_length.value if job.summary_length else "-"
    print(f"Length:     {tier}")
    print(f"Mode:       {job.generation_mode.value}")
    if job.final_audio_ref:
        print(f"Audio:      {job.final_audio_ref}")
        print(f"Duration:   {job.duration_seconds:.1f}s")
    if job.failure_reason:
        print(f"Failure:    {job.failure_reason}")
    print("=" * 80)


def run_job(args: argparse.Namespace, job_id: str, logger) -> int:
    config = PipelineConfig.from_env()
    request = GenerateEpisodeRequest(
        job_id=job_id,
        summary_length_tier=args.summary_length,
        voice_config={"voiceA": args.voice_a, "voiceB": args.voice_b},
        mode=args.mode,
    )
    logger.info(f"Running job {job_id} (storage: {config.storage_backend})")
    with EpisodeWorker(build_context(config), max_workers=1) as worker:
        job = worker.submit(request).result()
    print_job(job)
    return 0 if job.status == JobStatus.COMPLETED else 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the pipeline CLI."""
    args = parse_arguments(argv)
    logger = setup_logging(logger_name="pipeline", verbose=args.verbose)

    try:
        configure_database()
    except ValueError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        return 1

    if args.command == "init-db":
        if not check_database_connection():
            print("✗ Cannot connect to the database (see logs/database.log)", file=sys.stderr)
            return 1
        if not init_database():
            print("✗ Database initialization failed (see logs/database.log)", file=sys.stderr)
            return 1
        print("✓ Database tables created")
        return 0

    store = JobStore()
    try:
        if args.command == "status":
            print_job(store.read(args.job_id))
            return 0

        if args.command == "submit":
            try:
                transcript = read_transcript_file(args.transcript_file)
            except argparse.ArgumentTypeError as e:
                print(f"✗ Error: {e}", file=sys.stderr)
                return 1
            job = store.create(
                transcript=transcript,
                user_id=args.user_id,
                title=args.title,
                summary_length=SummaryLength(args.summary_length) if args.summary_length else None,
                generation_mode=GenerationMode(args.mode or GenerationMode.SINGLE.value),
                voice_a=args.voice_a,
                voice_b=args.voice_b,
            )
            print(f"✓ Created job {job.id}")
            if args.no_run:
                return 0
            return run_job(args, job.id, logger)

        return run_job(args, args.job_id, logger)

    except JobNotFoundError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"Pipeline command failed: {e}", exc_info=True)
        print(f"\n✗ PIPELINE FAILED: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
