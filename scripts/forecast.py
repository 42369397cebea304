#!/usr/bin/env python3
"""
Forecast ETH prices beyond the end of the data.

Refits one model (or the combination) on the full series.

Usage:
    python scripts/forecast.py --model arima                 # 30 days ahead
    python scripts/forecast.py --model combination --horizon 90
    python scripts/forecast.py --model ets --output out.csv  # Save to file
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from eth_forecast.config import Config
from eth_forecast.pipeline import Pipeline


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="ETH Price Forecast"
    )

    parser.add_argument(
        '--config',
        type=str,
        default='config/config.yaml',
        help='Path to configuration file'
    )

    parser.add_argument(
        '--model',
        type=str,
        default='combination',
        help='Model name or "combination"'
    )

    parser.add_argument(
        '--horizon',
        type=int,
        default=30,
        help='Days ahead to forecast'
    )

    parser.add_argument(
        '--output',
        type=str,
        help='Output CSV path'
    )

    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_args()

    config = Config(args.config)
    pipeline = Pipeline(config)

    if args.model not in pipeline.model_names:
        print(f"Unknown model '{args.model}'. Choose from {pipeline.model_names}")
        sys.exit(2)

    forecast = pipeline.forecast_ahead(args.model, args.horizon)

    print(f"\n{'='*60}")
    print(f"ETH FORECAST - {args.model} ({args.horizon} days)")
    print(f"{'='*60}")

    columns = [c for c in ('price', 'price_lower', 'price_upper') if c in forecast.columns]
    print(forecast[columns].to_string(float_format=lambda x: f'${x:,.2f}'))

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        forecast.to_csv(output)
        print(f"\nSaved to {output}")


if __name__ == '__main__':
    main()
