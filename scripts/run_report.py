#!/usr/bin/env python3
"""
Main script for the ETH forecast comparison report.

Usage:
    python scripts/run_report.py                          # Full report
    python scripts/run_report.py --cutoff 2022-12-31      # Custom split
    python scripts/run_report.py --cutoff 2022,365        # Year, day-of-year
    python scripts/run_report.py --models arima ets       # Specific models
    python scripts/run_report.py --combine arima ets      # Combination members
    python scripts/run_report.py --no-plots --verbose
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from eth_forecast.config import Config
from eth_forecast.pipeline import Pipeline


def parse_cutoff(value: str):
    """Accept either a date or `YEAR,DAY_OF_YEAR`."""
    if ',' in value:
        year, day = value.split(',', 1)
        return [int(year), int(day)]
    return value


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="ETH Forecast Comparison Report"
    )

    parser.add_argument(
        '--config',
        type=str,
        default='config/config.yaml',
        help='Path to configuration file'
    )

    parser.add_argument(
        '--data',
        type=str,
        help='Price CSV (overrides data.csv_path)'
    )

    parser.add_argument(
        '--cutoff',
        type=parse_cutoff,
        help='Last training day: YYYY-MM-DD or YEAR,DAY_OF_YEAR'
    )

    parser.add_argument(
        '--models',
        type=str,
        nargs='+',
        help='Models to fit (default: all enabled in config)'
    )

    parser.add_argument(
        '--combine',
        type=str,
        nargs='+',
        help='Models averaged into the combination forecast'
    )

    parser.add_argument(
        '--seed',
        type=int,
        help='Random seed for stochastic models'
    )

    parser.add_argument(
        '--output',
        type=str,
        help='Report directory (overrides output.reports_path)'
    )

    parser.add_argument(
        '--no-plots',
        action='store_true',
        help='Do not generate figures'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args()


def apply_overrides(config: Config, args) -> None:
    """Apply command line overrides to the loaded configuration."""
    if args.data:
        config.override('data', 'csv_path', args.data)
    if args.cutoff is not None:
        config.override('split', 'train_end', args.cutoff)
    if args.models:
        config.restrict_models(args.models)
    if args.combine:
        config.override('combiner', 'members', args.combine)
        config.override('combiner', 'enabled', True)
    if args.seed is not None:
        config.override('random_seed', None, args.seed)
    if args.output:
        config.override('output', 'reports_path', args.output)
        config.override('output', 'visualizations_path', str(Path(args.output) / 'figures'))
    if args.no_plots:
        config.override('output', 'plots', False)


def main():
    """Main entry point."""
    args = parse_args()

    # Load configuration
    config = Config(args.config)

    # Set logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    apply_overrides(config, args)

    # Initialize pipeline
    pipeline = Pipeline(config)

    print(f"\n{'='*60}")
    print("ETH FORECAST COMPARISON")
    print(f"{'='*60}")
    print(f"Data: {config.data_config.csv_path}")
    print(f"Train end: {config.split_config.train_end}")
    print(f"Models: {pipeline.model_names}")
    print(f"{'='*60}\n")

    try:
        results = pipeline.run()
    except Exception as e:
        print(f"\nReport failed: {e}")
        sys.exit(1)

    print("\nTest set accuracy (ranked by RMSE):")
    print(results['accuracy'][['rank', 'me', 'rmse', 'mae', 'mape', 'mase']].to_string(float_format='%.4f'))
    print(f"\nReport written to {config.reports_path}")

    sys.exit(0)


if __name__ == '__main__':
    main()
