#!/usr/bin/env python3
"""
Latitude-Longitude Net - Orchestrator

Calculate and plot a latitude/longitude net, then export it.

Usage:
    python src/plot_net.py --lat-step 15 --lon-step 15 --formats glb csv
    python src/plot_net.py --config configs/net.json --output outputs
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
from datetime import datetime

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from graticule.config import NetConfig, Accuracy, PlotStep
from graticule.calculator import NetCalculator
from graticule.render import LinePrefab, check_line_prefab, plot_net
from graticule.io import build_metadata, export_formats

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ["glb", "csv"]


def build_config(args: argparse.Namespace) -> NetConfig:
    """Start from --config (or defaults) and apply any flags given."""
    config = NetConfig.from_json(args.config) if args.config else NetConfig()

    if args.lat_accuracy is not None or args.lon_accuracy is not None:
        config.accuracy = Accuracy(
            latitude=args.lat_accuracy if args.lat_accuracy is not None else config.accuracy.latitude,
            longitude=args.lon_accuracy if args.lon_accuracy is not None else config.accuracy.longitude
        )

    if args.lat_step is not None or args.lon_step is not None:
        lat_step = args.lat_step if args.lat_step is not None else config.plot_step.latitude
        lon_step = args.lon_step if args.lon_step is not None else config.plot_step.longitude
        if args.step_degrees:
            config.plot_step = PlotStep.from_degrees(lat_step, lon_step, config.accuracy)
        else:
            # Index strides must be whole; 2.7 is rejected rather than truncated
            config.plot_step = PlotStep(latitude=lat_step, longitude=lon_step)
            config.plot_step.validate()

    if args.rotation is not None:
        config.rotation_offset = tuple(args.rotation)
    if args.scale is not None:
        config.scale_coefficient = args.scale
    if args.output is not None:
        config.output_dir = args.output

    return config


def run(
    config: NetConfig,
    formats: List[str],
    prefab: Optional[LinePrefab] = None
) -> dict:
    """
    Plot Net: calculate, render and export.

    Args:
        config: Configuration
        formats: Export formats (glb, csv)
        prefab: Line template (built from config if None)

    Returns:
        Summary dictionary
    """
    summary = {
        "timestamp": datetime.now().isoformat(),
        "config": config.to_dict(),
        "formats": formats,
        "outputs": [],
        "errors": []
    }

    prefab = prefab or LinePrefab.from_config(config)
    message = check_line_prefab(prefab)
    if message is not None:
        logger.error(message)
        summary["errors"].append({"stage": "prefab", "error": message})
        return summary

    logger.info("=" * 60)
    logger.info("Latitude-Longitude Net")
    logger.info("=" * 60)

    try:
        config.validate()
        net = NetCalculator(config).calculate()
        group = plot_net(net, prefab, config.plot_step)
    except ValueError as e:
        logger.error(f"Plot failed: {e}")
        summary["errors"].append({"stage": "plot", "error": str(e)})
        return summary

    metadata = build_metadata(net, group, config)
    summary["net"] = metadata.to_dict()

    for fmt in formats:
        try:
            paths = export_formats(group, config.output_dir, [fmt], metadata)
            summary["outputs"].extend(str(p) for p in paths)
        except Exception as e:
            logger.error(f"Export {fmt} failed: {e}")
            summary["errors"].append({"stage": f"export_{fmt}", "error": str(e)})

    return summary


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Latitude-Longitude Net - Calculate, plot and export a lat/long net"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON config file"
    )
    parser.add_argument("--lat-accuracy", type=float, help="Latitude sample spacing (degrees)")
    parser.add_argument("--lon-accuracy", type=float, help="Longitude sample spacing (degrees)")
    parser.add_argument("--lat-step", type=float, help="Latitude plot step (index stride)")
    parser.add_argument("--lon-step", type=float, help="Longitude plot step (index stride)")
    parser.add_argument(
        "--step-degrees",
        action="store_true",
        help="Interpret --lat-step/--lon-step as degrees"
    )
    parser.add_argument(
        "--rotation", "-r",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        help="Rotation offset in degrees, applied X then Y then Z"
    )
    parser.add_argument("--scale", "-s", type=float, help="Scale coefficient")
    parser.add_argument(
        "--formats", "-f",
        nargs="+",
        choices=SUPPORTED_FORMATS,
        default=["glb"],
        help="Export formats"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output directory"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        config = build_config(args)
    except (ValueError, TypeError, OSError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logger.info(f"Accuracy: {config.accuracy.to_dict()}, plot step: {config.plot_step.to_dict()}")
    logger.info(f"Output: {config.output_dir}")

    summary = run(config, args.formats)

    # Save summary
    summary_path = Path(config.output_dir) / "run_summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2)

    logger.info(f"Summary saved to: {summary_path}")

    n_errors = len(summary["errors"])
    logger.info(f"COMPLETE: {len(summary['outputs'])} outputs, {n_errors} errors")

    if n_errors > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
