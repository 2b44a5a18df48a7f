#!/usr/bin/env python
"""
Command-line interface for Location Insight Generator

Usage:
    python cli.py map --location "Times Square New York" --lat 40.7580 --lon -73.9855 --output ts.json
    python cli.py street --location "5th Avenue" --lat 40.7359 --lon -73.9911 --heading 90 --pitch 10
    python cli.py search "Eiffel Tower Paris"
    python cli.py batch --input locations.csv --output ./analyses/ --mode street
"""

import os
import sys
import json
import csv
import random
import argparse
from datetime import datetime
from dataclasses import replace
from pathlib import Path

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from loguru import logger
from location_insight.config import get_config, validate_config
from location_insight.pipeline import LocationAnalysisPipeline
from location_insight.collectors import GeocodingError


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def build_pipeline(args) -> LocationAnalysisPipeline:
    config = get_config()
    if getattr(args, "offline", False):
        config = replace(config, enable_place_data=False)
    validate_config(config)
    rng = random.Random(args.seed) if args.seed is not None else None
    return LocationAnalysisPipeline(config=config, rng=rng, cache_dir=getattr(args, "cache_dir", None))


def resolve_location(pipeline: LocationAnalysisPipeline, args):
    """Use --lat/--lon when given, otherwise geocode --location"""
    if args.lat is not None and args.lon is not None:
        return args.location or f"{args.lat},{args.lon}", (args.lat, args.lon)
    if not args.location:
        raise ValueError("Either --lat/--lon or --location is required")
    found = pipeline.search_location(args.location)
    return found.title, found.coordinates


def cmd_map(args):
    """Generate a map analysis for a single location"""
    setup_logging(args.verbose)

    pipeline = None
    try:
        pipeline = build_pipeline(args)
        location, coordinates = resolve_location(pipeline, args)
        result = pipeline.analyze_map(location, coordinates)

        output_path = args.output or f"map_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        pipeline.save(result, output_path)

        logger.info(f"✓ Generated: {output_path}")
        logger.info(f"  Objects: {result.detection.total_objects}")
        logger.info(f"  Development: {result.analysis.development_level}")
        logger.info(f"  Air quality index: {result.analysis.air_quality_index}")

        if args.report:
            report_path = os.path.splitext(output_path)[0] + "_report.json"
            pipeline.save(pipeline.build_report(result), report_path)

        if args.summary:
            summary = {
                "location": result.location,
                "coordinates": result.coordinates,
                "total_objects": result.detection.total_objects,
                "buildings": len(result.detection.buildings),
                "roads": len(result.detection.roads),
                "trees": len(result.detection.trees),
                "water": len(result.detection.water),
                "vehicles": len(result.detection.vehicles),
                "infrastructure": len(result.detection.infrastructure),
                "population_estimate": result.analysis.population_estimate,
                "air_quality_index": result.analysis.air_quality_index,
                "development_level": result.analysis.development_level,
                "data_quality": result.place_data.data_quality if result.place_data else 0,
                "here_api_called": result.detection.here_api_called,
            }
            print(json.dumps(summary, indent=2))

        return 0

    except Exception as e:
        logger.error(f"Failed to analyze location: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1
    finally:
        if pipeline is not None:
            pipeline.close()


def cmd_street(args):
    """Generate a street-view analysis for a single camera position"""
    setup_logging(args.verbose)

    pipeline = None
    try:
        pipeline = build_pipeline(args)
        location, coordinates = resolve_location(pipeline, args)
        result = pipeline.analyze_street_view(location, coordinates, heading=args.heading, pitch=args.pitch)

        output_path = args.output or f"street_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        pipeline.save(result, output_path)

        logger.info(f"✓ Generated: {output_path}")
        logger.info(f"  Objects: {result.detection.total_objects}")
        logger.info(f"  Urban density: {result.scene.urban_density}")

        if args.summary:
            print(json.dumps(result.scene.model_dump(), indent=2))

        return 0

    except Exception as e:
        logger.error(f"Failed to analyze street view: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1
    finally:
        if pipeline is not None:
            pipeline.close()


def cmd_search(args):
    """Geocode a free-text location"""
    setup_logging(args.verbose)

    pipeline = None
    try:
        pipeline = build_pipeline(args)
        found = pipeline.search_location(args.query)
        print(json.dumps(found.model_dump(), indent=2))
        return 0
    except (ValueError, GeocodingError) as e:
        logger.error(f"Could not find the location: {e}")
        return 1
    except Exception as e:
        logger.error(f"Search failed: {e}")
        return 1
    finally:
        if pipeline is not None:
            pipeline.close()


def read_locations_csv(path: str):
    """
    Rows with name, lat, lon and optional heading, pitch columns.
    A ``location`` column, when present, is used as the analysis text instead of the name.
    """
    rows = []
    with open(path, "r", newline="", encoding="utf-8") as f:
        for line_no, row in enumerate(csv.DictReader(f), start=2):
            try:
                rows.append({
                    "name": (row.get("name") or "").strip(),
                    "location": (row.get("location") or row.get("name") or "").strip(),
                    "coordinates": (float(row["lat"]), float(row["lon"])),
                    "heading": float(row.get("heading") or 0.0),
                    "pitch": float(row.get("pitch") or 0.0),
                })
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Line {line_no}: skipped ({e})")
    return rows


def cmd_batch(args):
    """Run map or street-view analyses for every row of a CSV"""
    setup_logging(args.verbose)

    if not os.path.exists(args.input):
        logger.error(f"Input file not found: {args.input}")
        return 1

    rows = read_locations_csv(args.input)
    if not rows:
        logger.error(f"No usable rows in {args.input}")
        return 1

    out_dir = Path(args.output)
    out_dir.mkdir(parents=True, exist_ok=True)

    try:
        pipeline = build_pipeline(args)
    except Exception as e:
        logger.error(f"Failed to set up the pipeline: {e}")
        return 1
    failures = []

    logger.info(f"Batch {args.mode} analysis: {len(rows)} locations -> {out_dir}")
    try:
        for i, row in enumerate(rows, 1):
            slug = row["name"].replace(" ", "_").lower() or f"location_{i:03d}"
            try:
                if args.mode == "street":
                    result = pipeline.analyze_street_view(
                        row["location"], row["coordinates"], heading=row["heading"], pitch=row["pitch"]
                    )
                    detail = result.scene.urban_density
                else:
                    result = pipeline.analyze_map(row["location"], row["coordinates"])
                    detail = result.analysis.development_level
                pipeline.save(result, str(out_dir / f"{slug}_{args.mode}.json"))
                logger.info(f"  ✓ [{i}/{len(rows)}] {slug}: {result.detection.total_objects} objects, {detail}")
            except Exception as e:
                logger.error(f"  ✗ [{i}/{len(rows)}] {slug}: {e}")
                failures.append(slug)
    finally:
        pipeline.close()

    logger.info(f"Done: {len(rows) - len(failures)} succeeded, {len(failures)} failed")
    return 0 if not failures else 1


def main():
    parser = argparse.ArgumentParser(
        description="Location Insight Generator - synthetic map and street-view analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py map --location "Times Square New York" --lat 40.7580 --lon -73.9855 --summary
  python cli.py map --location "Central Park New York" --report
  python cli.py street --location "Broadway Manhattan" --lat 40.7590 --lon -73.9845 --pitch 30
  python cli.py search "Eiffel Tower Paris"
  python cli.py batch --input locations.csv --output ./analyses/ --mode street
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible output")

    subparsers = parser.add_subparsers(dest="command", help="Command")

    map_parser = subparsers.add_parser("map", help="Generate map analysis for a location")
    map_parser.add_argument("--location", type=str, default="", help="Location name (geocoded if no lat/lon)")
    map_parser.add_argument("--lat", type=float, default=None, help="Latitude")
    map_parser.add_argument("--lon", type=float, default=None, help="Longitude")
    map_parser.add_argument("--output", "-o", type=str, default=None, help="Output JSON file")
    map_parser.add_argument("--cache-dir", type=str, default=None, help="Cache HERE responses here")
    map_parser.add_argument("--offline", action="store_true", help="Skip HERE place data")
    map_parser.add_argument("--report", action="store_true", help="Also write the location report")
    map_parser.add_argument("--summary", action="store_true", help="Print summary to stdout")

    street_parser = subparsers.add_parser("street", help="Generate street-view analysis")
    street_parser.add_argument("--location", type=str, default="", help="Location name")
    street_parser.add_argument("--lat", type=float, default=None, help="Latitude")
    street_parser.add_argument("--lon", type=float, default=None, help="Longitude")
    street_parser.add_argument("--heading", type=float, default=0.0, help="Camera heading (degrees)")
    street_parser.add_argument("--pitch", type=float, default=0.0, help="Camera pitch (-90 to 90 degrees)")
    street_parser.add_argument("--output", "-o", type=str, default=None, help="Output JSON file")
    street_parser.add_argument("--summary", action="store_true", help="Print scene labels to stdout")

    search_parser = subparsers.add_parser("search", help="Geocode a location")
    search_parser.add_argument("query", type=str, help="Free-text location")

    batch_parser = subparsers.add_parser("batch", help="Batch analyses from CSV (name,lat,lon[,heading,pitch])")
    batch_parser.add_argument("--input", "-i", type=str, required=True, help="Input CSV file")
    batch_parser.add_argument("--output", "-o", type=str, default="output", help="Output directory")
    batch_parser.add_argument("--offline", action="store_true", help="Skip HERE place data")
    batch_parser.add_argument("--mode", choices=["map", "street"], default="map", help="Analysis to run per row")
    batch_parser.add_argument("--cache-dir", type=str, default=None, help="Cache HERE responses here")

    args = parser.parse_args()

    if args.command == "map":
        return cmd_map(args)
    elif args.command == "street":
        return cmd_street(args)
    elif args.command == "search":
        return cmd_search(args)
    elif args.command == "batch":
        return cmd_batch(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
