"""
Command-line interface for shape detection.

Provides commands for detecting shapes in image files and writing a
default configuration.
"""

import argparse
import sys

from shapedetect.config import load_config, save_default_config
from shapedetect.tracer import configure_tracer, get_tracer


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="shapedetect",
        description="Detect circles, triangles, rectangles, pentagons and stars in images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    detect_parser = subparsers.add_parser("detect", help="Detect shapes in images")
    detect_parser.add_argument(
        "--inputs", "-i",
        nargs="+",
        required=True,
        help="Input image files",
    )
    detect_parser.add_argument(
        "--out", "-o",
        default=None,
        help="Output directory for detections JSON and overlays",
    )
    detect_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    detect_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug artifact generation",
    )
    detect_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    detect_parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    detect_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    detect_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )

    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="shapedetect_config.yaml",
        help="Output path for config file",
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "detect":
        return handle_detect(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def handle_detect(args):
    """Handle the detect command."""
    config = load_config(args.config)

    if args.trace:
        configure_tracer(
            enabled=True,
            level=args.trace_level,
            file_path=args.trace_file,
            json_output=args.trace_json,
        )
    else:
        configure_tracer(
            enabled=config.tracing.enabled,
            level=config.tracing.level,
            file_path=config.tracing.file_path,
            json_output=config.tracing.json_output,
        )

    tracer = get_tracer()

    try:
        from shapedetect.pipeline import detect_image_file

        for path in args.inputs:
            with tracer.span("cli_detect", module="cli", path=path):
                result = detect_image_file(
                    path,
                    config=config,
                    out_dir=args.out,
                    debug=args.debug,
                )

            print(f"\n{path}: {result.image_width}x{result.image_height}, "
                  f"{len(result.shapes)} shapes in {result.processing_time_ms:.1f}ms")
            if not result.shapes:
                print("  No shapes detected.")
            for shape in result.shapes:
                print(f"  - {shape.type.value:<9} confidence={shape.confidence:.2f} "
                      f"center=({shape.center.x:.1f}, {shape.center.y:.1f}) area={shape.area:.1f}")

        if args.out:
            print(f"\nOutputs saved to: {args.out}/")

        return 0

    except Exception as e:
        tracer.event(f"Detection failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    finally:
        tracer.sink.close()


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
