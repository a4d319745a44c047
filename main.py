#!/usr/bin/env python3
"""
CodePulse - Main Entry Point.

Usage:
    python main.py                          # Run the Streamlit dashboard
    python main.py --cli "Backend Engineer" # Print a prep kit in the terminal
"""

import argparse
import asyncio
import logging
import os
import subprocess
import sys
from pathlib import Path


def setup_python_path():
    """Add project root to Python path."""
    project_root = Path(__file__).parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


def run_dashboard(port: int | None = None) -> int:
    """Launch the Streamlit dashboard."""
    dashboard = Path(__file__).parent / "codepulse" / "ui" / "dashboard.py"

    command = [sys.executable, "-m", "streamlit", "run", str(dashboard)]
    if port is not None:
        command += ["--server.port", str(port)]

    print("\n" + "=" * 60)
    print("🎯  CodePulse - AI Interview Prep")
    print("=" * 60)
    print("\nPress Ctrl+C to stop the dashboard\n")

    return subprocess.call(command)


async def run_cli_demo(job_role: str, difficulty: str | None = None, job_description: str | None = None):
    """Generate a prep kit (or a randomized set) and print it."""
    setup_python_path()

    from codepulse.app.orchestrator import create_orchestrator
    from codepulse.core.config import configure_logging
    from codepulse.core.exceptions import ClassifiedError, InputError

    configure_logging()
    logger = logging.getLogger(__name__)

    print("\n" + "=" * 60)
    print("🎯  CodePulse - CLI Demo")
    print("=" * 60 + "\n")
    print(f"🧭 Role: {job_role}")
    if difficulty:
        print(f"🎲 Difficulty: {difficulty}")
    print("\n" + "-" * 60 + "\n")

    orchestrator = create_orchestrator()

    try:
        if difficulty:
            result = await orchestrator.generate_randomized_prep_set(job_role, difficulty, job_description)
        else:
            result = await orchestrator.generate_full_prep_kit(job_role, job_description)
    except (InputError, ClassifiedError) as e:
        logger.debug("Demo failed", exc_info=True)
        print(f"\n❌ Error: {e.message}")
        print("   Make sure GEMINI_API_KEY is set in .env")
        return 1

    print(f"📦 Role category: {result.role_category.value}\n")

    print("🗣️  General Questions")
    for i, qa in enumerate(result.general_questions, 1):
        print(f"   {i}. {qa.question}")

    print("\n🔧 Role-Specific Questions")
    for i, qa in enumerate(result.technical_questions, 1):
        print(f"   {i}. {qa.question}")

    design = getattr(result, "system_design_questions", None)
    if design:
        print("\n🏛️  Design / Strategy Questions")
        for i, qa in enumerate(design, 1):
            print(f"   {i}. {qa.question}")

    print("\n💻 Challenges")
    for i, challenge in enumerate(result.coding_challenges, 1):
        print(f"   {i}. {challenge.title}")

    print(f"\n🏗️  Machine Coding: {result.machine_coding.title}")
    print("\n" + "=" * 60 + "\n")
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="CodePulse - AI Interview Prep"
    )
    parser.add_argument(
        "--cli",
        metavar="JOB_ROLE",
        default=None,
        help="Generate a prep kit for JOB_ROLE in the terminal instead of the dashboard",
    )
    parser.add_argument(
        "--difficulty",
        choices=["Fresher", "Junior", "Mid-Level", "Senior"],
        default=None,
        help="With --cli, generate a randomized practice set at this level",
    )
    parser.add_argument(
        "--job-description",
        default=None,
        help="With --cli, optional job description text",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the dashboard (default: Streamlit's default)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    setup_python_path()

    if args.debug:
        os.environ["LOG_LEVEL"] = "DEBUG"

    if args.cli:
        sys.exit(asyncio.run(run_cli_demo(args.cli, args.difficulty, args.job_description)))

    sys.exit(run_dashboard(port=args.port))


if __name__ == "__main__":
    main()
