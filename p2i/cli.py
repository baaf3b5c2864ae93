#!/usr/bin/env python3
"""
Postman to Insomnia Converter - command line entry point
========================================================

Usage:
    postman2insomnia <inputs...> [options]
    postman2insomnia --generate-config transform-config.json [--experimental]
    postman2insomnia --validate-config transform-config.json

Arguments:
    inputs: Postman collection / environment files or glob patterns

Examples:
    # Convert every collection in a folder to YAML
    postman2insomnia "collections/*.json" -o ./insomnia

    # Apply the default transform rules, output JSON
    postman2insomnia api.postman_collection.json --preprocess --postprocess -f json

    # Use a customised rule file
    postman2insomnia api.json --postprocess --config-file my-rules.json
"""

import glob
import re
import sys
import argparse
from pathlib import Path
from typing import List, Optional

from .config.loader import ConfigLoader
from .config.models import P2IConfig
from .converters.batch import BatchConverter
from .engine.transform_engine import generate_sample_config, compile_rule_pattern
from .utils.constants import OUTPUT_FORMATS
from .utils.exceptions import ConfigurationError
from .version import get_version_string


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog='postman2insomnia',
        description="Convert Postman collections and environments to Insomnia v5 format",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s "collections/*.json" -o ./insomnia            # Batch conversion
  %(prog)s api.json --preprocess --postprocess -f json   # With transforms
  %(prog)s --generate-config transform-config.json       # Sample rule file
        """
    )

    parser.add_argument('inputs', nargs='*', help='Postman JSON files or glob patterns')

    parser.add_argument('-o', '--output', default=None,
                        help='Output directory (default: ./output)')
    parser.add_argument('-f', '--format', choices=OUTPUT_FORMATS, default=None,
                        help='Output format (default: yaml)')
    parser.add_argument('-m', '--merge', action='store_true',
                        help='Merge all collections into a single document')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')

    transforms = parser.add_argument_group('transforms')
    transforms.add_argument('--preprocess', action='store_true',
                            help='Apply preprocess rules to the raw Postman JSON')
    transforms.add_argument('--postprocess', action='store_true',
                            help='Apply postprocess rules to converted scripts')
    transforms.add_argument('--experimental', action='store_true',
                            help='Also apply experimental rules')
    transforms.add_argument('--config-file', default=None,
                            help='Transform rule configuration file')
    transforms.add_argument('--generate-config', metavar='PATH', default=None,
                            help='Write a sample transform configuration and exit')
    transforms.add_argument('--validate-config', metavar='PATH', default=None,
                            help='Check a transform configuration file and exit')

    parser.add_argument('--settings', default=None,
                        help='Converter settings file (p2i_config.json)')
    parser.add_argument('--use-collection-folder', action='store_true',
                        help='Nest items under a folder named after the collection')
    parser.add_argument('--include-response-examples', action='store_true',
                        help='Append saved Postman responses to request descriptions')
    parser.add_argument('--version', action='version', version=get_version_string())

    return parser


def expand_inputs(patterns: List[str]) -> List[str]:
    """Expand glob patterns; keep existing .json files, first occurrence wins."""
    files = []
    seen = set()
    for pattern in patterns:
        matches = sorted(glob.glob(pattern)) or [pattern]
        for match in matches:
            path = Path(match)
            if path.suffix.lower() != '.json' or not path.is_file():
                continue
            key = str(path.resolve())
            if key not in seen:
                seen.add(key)
                files.append(str(path))
    return files


def validate_transform_config(config_path: str) -> int:
    """Print a report on a transform configuration file; 0 when valid."""
    print(f"📋 Validating transform config {config_path}...")
    try:
        config = ConfigLoader.load_transform_config(config_path)
    except ConfigurationError as e:
        print(f"❌ Configuration Error: {e}")
        return 1

    problems = 0
    for phase, rules in (('preprocess', config.preprocess), ('postprocess', config.postprocess)):
        names = set()
        for rule in rules:
            if rule.name in names:
                print(f"   ⚠️  Duplicate {phase} rule name: {rule.name}")
                problems += 1
            names.add(rule.name)
            try:
                compile_rule_pattern(rule.pattern, rule.flags)
            except (re.error, ValueError) as e:
                print(f"   ❌ {phase} rule \"{rule.name}\" does not compile: {e}")
                problems += 1
        print(f"   ✅ {len(rules)} {phase} rules")

    if problems:
        print(f"❌ {problems} problem(s) found")
        return 1
    print("✅ Transform config is valid")
    return 0


def build_config(args: argparse.Namespace) -> P2IConfig:
    """Settings file values, overridden by command line flags."""
    config = ConfigLoader.load(args.settings) if args.settings else P2IConfig()

    if args.output:
        config.output.directory = Path(args.output)
    if args.format:
        config.output.format = args.format
    config.output.merge = config.output.merge or args.merge
    config.verbose = config.verbose or args.verbose

    transforms = config.transforms
    transforms.preprocess = transforms.preprocess or args.preprocess
    transforms.postprocess = transforms.postprocess or args.postprocess
    transforms.experimental = transforms.experimental or args.experimental
    if args.config_file:
        transforms.config_file = args.config_file

    importer = config.importer
    importer.use_collection_folder = importer.use_collection_folder or args.use_collection_folder
    importer.include_response_examples = importer.include_response_examples or args.include_response_examples

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        if args.generate_config:
            generate_sample_config(args.generate_config, experimental=args.experimental)
            return 0

        if args.validate_config:
            return validate_transform_config(args.validate_config)

        if not args.inputs:
            print("❌ Error: no input files given")
            parser.print_usage()
            return 1

        config = build_config(args)

        files = expand_inputs(args.inputs)
        if not files:
            print("❌ Error: no Postman JSON files matched the given inputs")
            return 1

        if config.verbose:
            print(f"🔧 {get_version_string()}")
            print(f"   Files: {len(files)}")
            print(f"   Output: {config.output.directory} ({config.output.format})")
            print()

        result = BatchConverter(config).convert_files(files)

        print()
        print(f"✅ Conversion complete: {result.successful} successful, {result.failed} failed")
        for output in result.outputs:
            print(f"   📁 {output}")

        return 0 if result.successful > 0 else 1

    except ConfigurationError as e:
        print(f"❌ Configuration Error: {e}")
        return 1

    except OSError as e:
        print(f"❌ File Error: {e}")
        return 1

    except KeyboardInterrupt:
        print(f"\n⚠️  Conversion interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
