"""Command-line interface for LLM Visibility."""

import argparse
import json
import logging
import sys

from .core.config import settings
from .core.constants import FileConstants
from .core.models import CompanyProfile, LlmProvider
from .services.llm import LLMClientFactory
from .services.pipeline import run_visibility_flow
from .services.visibility_scoring import VisibilityScoringOptions
from .utils.data_prep import company_from_dict, export_to_json, load_company_profile, prepare_export

logger = logging.getLogger(__name__)


def setup_logging():
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=FileConstants.LOG_FORMAT
    )


def company_from_args(args) -> CompanyProfile:
    """Build the company profile from --company-file or individual flags."""
    if args.company_file:
        return load_company_profile(args.company_file)
    return company_from_dict({
        "name": args.name,
        "description": args.description,
        "services": args.services or [],
        "website": args.website,
        "targetLocales": args.locales,
    })


def cmd_analyze(args):
    """Analyze command."""
    company = company_from_args(args)
    scoring_options = VisibilityScoringOptions(enable_scoring=False) if args.no_scoring else None

    print(f"Analyzing visibility of '{company.name}' for {len(company.services)} service(s)...")
    result = run_visibility_flow(company, client=LLMClientFactory.create(settings),
                                 settings=settings, scoring_options=scoring_options)
    payload = prepare_export(result)

    if args.out:
        export_to_json(payload, args.out)
        print(f"Results exported to {args.out}")

    print(f"\nVisibility Summary for '{company.name}':")
    print(f"Questions asked: {len(result.questions)}")
    for insight in result.insights:
        print(f"  {insight.service}: {insight.avg_score:.2f} - {insight.comments[0]}")

    if result.recommendations:
        print("\nRecommendations:")
        for i, rec in enumerate(result.recommendations, 1):
            print(f"  {i}. {rec.title}")
            print(f"     {rec.description}")


def _mask(key: str) -> str:
    if len(key) <= 11:
        return "***"
    return f"{key[:7]}...{key[-4:]}"


def cmd_providers(args):
    """Show which providers have credentials."""
    client = LLMClientFactory.create(settings)
    print("=== API Keys Status ===")
    for provider in LlmProvider:
        if client.has_credential(provider):
            print(f"{provider.value}: configured ({_mask(client.api_key(provider).strip())})")
        else:
            print(f"{provider.value}: not configured (set {provider.value.upper()}_API_KEY in .env)")


def cmd_export(args):
    """Export command."""
    try:
        with open(args.input_file, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if args.pretty:
            # Pretty print the JSON
            print(json.dumps(data, indent=2, ensure_ascii=False))
        else:
            # Export to file
            output_file = args.output or args.input_file.replace('.json', '_export.json')
            export_to_json(data, output_file)
            print(f"Exported to {output_file}")

    except FileNotFoundError:
        print(f"Input file {args.input_file} not found")
    except json.JSONDecodeError as e:
        print(f"Invalid JSON in input file: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LLM Visibility - company visibility in AI assistant answers")
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Analyze command
    analyze_parser = subparsers.add_parser('analyze', help='Run a visibility analysis')
    analyze_parser.add_argument('--company-file', help='YAML or JSON company profile')
    analyze_parser.add_argument('--name', help='Company name')
    analyze_parser.add_argument('--description', default='', help='Short company description')
    analyze_parser.add_argument('--service', dest='services', action='append', help='Service to track (repeatable)')
    analyze_parser.add_argument('--website', help='Company website')
    analyze_parser.add_argument('--locale', dest='locales', action='append', help='Target locale, e.g. en (repeatable)')
    analyze_parser.add_argument('--no-scoring', action='store_true', help='Use heuristic scoring only')
    analyze_parser.add_argument('--out', help='Output JSON file')

    # Providers command
    subparsers.add_parser('providers', help='Show provider credential status')

    # Export command
    export_parser = subparsers.add_parser('export', help='Export analysis results')
    export_parser.add_argument('--in', dest='input_file', required=True, help='Input JSON file')
    export_parser.add_argument('--out', dest='output', help='Output file (optional)')
    export_parser.add_argument('--pretty', action='store_true', help='Pretty print to stdout')

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    setup_logging()

    try:
        if args.command == 'analyze':
            cmd_analyze(args)
        elif args.command == 'providers':
            cmd_providers(args)
        elif args.command == 'export':
            cmd_export(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
