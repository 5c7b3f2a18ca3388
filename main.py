"""
Submittal Compliance Engine - Main Entry Point

Used to run different modes from command line.
"""

import sys
import argparse
import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from compliance_engine.config import EngineConfig
from compliance_engine.engine import AnalysisEngine, resolve_config
from compliance_engine.utils import get_settings, setup_logger, ensure_directories, load_text_file


def cmd_analyze(args):
    """
    Analyze a submittal against its specification

    Usage:
        python main.py analyze --submittal sub.txt --specification spec.txt
        python main.py analyze --submittal sub.txt --specification spec.txt --lenient --pass-score 75
    """
    logger.info("=" * 60)
    logger.info("Compliance Analysis")
    logger.info("=" * 60)

    try:
        submittal_text = load_text_file(args.submittal)
        specification_text = load_text_file(args.specification)
    except FileNotFoundError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    settings = get_settings()
    overrides = {}
    if args.lenient:
        overrides['strict_mode'] = False
    if args.pass_score is not None:
        overrides['compliance_pass_score'] = args.pass_score

    try:
        base = EngineConfig.from_settings(settings)
        config = resolve_config(overrides, base)
    except ValidationError as e:
        logger.error(f"❌ Invalid engine options: {e}")
        sys.exit(1)

    analysis_id = args.analysis_id or Path(args.submittal).stem
    engine = AnalysisEngine(config)
    outcome = engine.analyze(
        submittal_text,
        specification_text,
        analysis_id,
        file_name=Path(args.submittal).name,
    )
    report = outcome.report

    # Display results
    print("\n" + "=" * 60)
    print(f"📋 ANALYSIS: {analysis_id} ({outcome.status.value})")
    print("=" * 60)
    print(f"\n📊 Score: {report.compliance_score}% - {report.overall_assessment.value}")
    print(f"\n{report.summary}\n")

    if report.detailed_findings:
        print("=" * 60)
        print("🔍 FINDINGS:")
        print("=" * 60)
        for finding in report.detailed_findings:
            print(f"\n[{finding.severity.value.upper()}] {finding.title}")
            print(f"    Action: {finding.corrective_action}")
            print(f"    Deadline: {finding.deadline}")

    if report.action_items:
        print("\n" + "=" * 60)
        print("✅ ACTION ITEMS:")
        print("=" * 60)
        for item in report.action_items:
            print(f"  • {item.title} ({item.priority.value}, due {item.due_date}) - {item.assigned_to}")

    output_path = Path(args.output) if args.output else Path(settings.output_dir) / f"{analysis_id}.json"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(outcome.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    logger.success(f"✅ Report saved: {output_path}")

    if outcome.degraded:
        sys.exit(2)


def cmd_serve(args):
    """
    Start FastAPI server

    Usage:
        python main.py serve
    """
    from compliance_engine.api import start_server

    logger.info("=" * 60)
    logger.info("Starting API Server")
    logger.info("=" * 60)

    start_server(host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Submittal Compliance Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py analyze --submittal sub.txt --specification spec.txt    # Analyze a submittal
  python main.py analyze --submittal sub.txt --specification spec.txt --output report.json
  python main.py serve                                                    # Start API server
        """
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # analyze command
    parser_analyze = subparsers.add_parser('analyze', help='Analyze a submittal against a specification')
    parser_analyze.add_argument('--submittal', required=True, help='Submittal plain text file')
    parser_analyze.add_argument('--specification', required=True, help='Specification plain text file')
    parser_analyze.add_argument('--analysis-id', help='Analysis id (default: submittal file name)')
    parser_analyze.add_argument('--output', help='JSON report path (default: <output_dir>/<id>.json)')
    parser_analyze.add_argument(
        '--lenient',
        action='store_true',
        help='Disable strict mode (value mismatches are never critical)'
    )
    parser_analyze.add_argument(
        '--pass-score',
        type=int,
        help='Minimum category score for a pass (0-100)'
    )
    parser_analyze.set_defaults(func=cmd_analyze)

    # serve command
    parser_serve = subparsers.add_parser('serve', help='Start API server')
    parser_serve.add_argument('--host', help='Bind address (default from settings)')
    parser_serve.add_argument('--port', type=int, help='Port (default from settings)')
    parser_serve.set_defaults(func=cmd_serve)

    return parser


def main():
    """Main function - CLI parser"""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    # Setup logger
    settings = get_settings()
    setup_logger(settings.log_level, settings.log_dir)

    # Ensure required directories exist
    ensure_directories(settings)

    # Run the relevant command
    args.func(args)


if __name__ == "__main__":
    main()
