"""Instagram Image Extractor - command line entry point."""

import argparse
import json
import sys

from .config import Config, load_config, setup_logging
from .exceptions import AllStrategiesExhausted, InvalidUrl
from .orchestrator import Extractor


def cmd_extract(config: Config, args, logger) -> int:
    extractor = Extractor(config.extraction)
    try:
        result = extractor.resolve(args.url)
    except InvalidUrl as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except AllStrategiesExhausted as e:
        print(f"No image found for {args.url}", file=sys.stderr)
        for attempt in e.failure.attempts:
            print(f"  {attempt.strategy}: {attempt.reason}", file=sys.stderr)
        return 1

    if args.url_only:
        print(result.image_url)
    else:
        print(json.dumps(result.to_dict(), indent=2))
    return 0


def cmd_probe(config: Config, args, logger) -> int:
    extractor = Extractor(config.extraction)
    report = extractor.probe(args.url)
    print(json.dumps(report, indent=2))
    return 0 if report["isValidFormat"] else 2


def cmd_serve(config: Config, args, logger) -> int:
    import uvicorn

    from .web.app import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port
    logger.info(f"Instagram Image Extractor API running on port {port}")
    uvicorn.run(create_app(config), host=host, port=port)
    return 0


def main():
    """Entry point."""
    parser = argparse.ArgumentParser(
        description="Find the full-resolution image of a public Instagram post"
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to configuration file (default: built-in defaults)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser("extract", help="Print the image URL of a post")
    extract_parser.add_argument("url", help="Instagram post URL")
    extract_parser.add_argument(
        "--url-only",
        action="store_true",
        help="Print only the image URL instead of the full JSON result",
    )
    extract_parser.set_defaults(func=cmd_extract)

    probe_parser = subparsers.add_parser("probe", help="Run every method and report each")
    probe_parser.add_argument("url", help="Instagram post URL")
    probe_parser.set_defaults(func=cmd_probe)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    logger = setup_logging(config.logging)

    try:
        sys.exit(args.func(config, args, logger))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
