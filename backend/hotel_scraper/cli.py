"""
Command line entry point.

Usage:
    hotel-scraper [-n number_of_hotels] "country name"
    python -m hotel_scraper [-n number_of_hotels] "country name"

Examples:
    hotel-scraper "United States"             # 200 hotels -> united_states_hotels.csv
    hotel-scraper -n 300 "United States"      # 300 hotels
    hotel-scraper --list                      # List configured sites
"""

import asyncio
import argparse
import logging
import signal
import sys
import time
from typing import List, Optional

from pydantic import ValidationError

from .base import (
    Colors,
    EmptyResultError,
    ExportError,
    RetryExhaustedError,
    ScrapeCancelledException,
)
from .config import get_enabled_sites, get_site_summary
from .exporters import save_to_csv
from .logging_config import configure_logging
from .manager import ScraperManager, get_scraper, get_implemented_scrapers
from .settings import Settings, settings as default_settings
from .utils.normalizers import output_filename

logger = logging.getLogger('scraper.cli')

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hotel-scraper',
        description='Scrape hotel listings from a search-results site into a CSV file',
    )
    parser.add_argument('country', nargs='?', help='Country or region to search for')
    parser.add_argument('-n', type=int, default=None, dest='target',
                        help=f'Number of hotels to scrape (default {default_settings.default_target})')
    parser.add_argument('-o', '--output', type=str, help='Output CSV path (default <country>_hotels.csv)')
    parser.add_argument('--site', type=str, default=None, help='Site key to scrape (default booking)')
    parser.add_argument('--static', action='store_true', help='Fetch pages without a browser')
    parser.add_argument('--no-headless', action='store_true', help='Show the browser window')
    parser.add_argument('--max-retries', type=int, help='Retries per page before giving up (0 = unlimited)')
    parser.add_argument('--delay', type=float, help='Seconds to wait between pages')
    parser.add_argument('--timeout', type=float, help='Seconds allowed per page load')
    parser.add_argument('--max-pages', type=int, help='Stop after this many pages')
    parser.add_argument('--deadline', type=float, help='Cancel the run after this many seconds')
    parser.add_argument('--log-level', type=str, help='Log level (DEBUG, INFO, WARNING, ...)')
    parser.add_argument('--list', action='store_true', help='List configured sites and exit')
    return parser


def settings_from_args(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """Overlay command line flags on the loaded settings."""
    base = base or default_settings
    overrides = {}
    if args.site:
        overrides['site'] = args.site.lower()
    if args.static:
        overrides['static'] = True
    if args.no_headless:
        overrides['headless'] = False
    if args.max_retries is not None:
        overrides['max_page_retries'] = args.max_retries
    if args.delay is not None:
        overrides['page_delay'] = args.delay
    if args.timeout is not None:
        overrides['fetch_timeout'] = args.timeout
    if args.max_pages is not None:
        overrides['max_pages'] = args.max_pages
    if args.log_level:
        overrides['log_level'] = args.log_level
    # Rebuilt rather than copied so the overrides go through validation
    return type(base)(**{**base.model_dump(), **overrides})


def list_scrapers():
    """List all configured sites."""
    print(f"\n{'='*60}")
    print("Available Sites")
    print(f"{'='*60}\n")

    implemented = get_implemented_scrapers()
    for site in get_site_summary():
        status = "✅" if site['enabled'] else "⏳"
        impl = "IMPL" if site['key'] in implemented else "TODO"
        print(f"{status} [{impl}] {site['key']:12} - {site['name']}")
        print(f"              Type: {site['type']}, {site['page_size']} per page")
        print()


def save_partial(hotels, output: str, reason: str):
    """Export hotels collected before the run ended early, if any."""
    if not hotels:
        return
    try:
        path = save_to_csv(hotels, output)
        logger.warning(Colors.yellow(f"Saved {len(hotels)} hotels collected before {reason} to {path}"))
    except ExportError as e:
        logger.error(Colors.red(str(e)))


async def run_scrape(country: str, target: int, output: str, app_settings: Settings,
                     deadline: Optional[float] = None, crawler=None) -> int:
    """
    Scrape, export and report. Returns the process exit code.
    """
    scraper = get_scraper(app_settings.site, country, crawler=crawler, app_settings=app_settings)
    manager = ScraperManager(
        scraper,
        target,
        page_delay=app_settings.page_delay,
        max_page_retries=app_settings.max_page_retries,
        retry_backoff=app_settings.retry_backoff,
        max_pages=app_settings.max_pages,
        deadline=deadline,
    )
    logger.debug(f"Scraper: {scraper.describe()}")

    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, manager.cancel)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            pass  # Not supported on this platform / thread

    start = time.monotonic()
    try:
        result = await manager.run()
    except ScrapeCancelledException:
        save_partial(manager.result.hotels, output, "cancellation")
        return EXIT_CANCELLED
    except RetryExhaustedError as e:
        logger.error(Colors.red(str(e)))
        save_partial(manager.result.hotels, output, "the failure")
        return EXIT_FAILURE
    except EmptyResultError as e:
        logger.error(Colors.red(str(e)))
        return EXIT_FAILURE
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        await scraper.close()

    try:
        path = save_to_csv(result.hotels, output)
    except ExportError as e:
        logger.error(Colors.red(str(e)))
        return EXIT_FAILURE

    elapsed = time.monotonic() - start
    logger.info(Colors.green(f"✓ Scraping completed in {elapsed:.1f}s"))
    logger.info(Colors.green(f"✓ Total hotels scraped: {result.total}"))
    logger.info(Colors.green(f"✓ Results saved to: {path}"))
    logger.debug(f"Run summary: {result.to_dict()}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list:
        list_scrapers()
        return EXIT_OK

    if not args.country or not args.country.strip():
        parser.print_usage(sys.stderr)
        print("error: please provide a country name", file=sys.stderr)
        print('example: hotel-scraper -n 300 "United States"', file=sys.stderr)
        return EXIT_USAGE

    target = args.target if args.target is not None else default_settings.default_target
    if target < 1:
        parser.print_usage(sys.stderr)
        print(f"error: -n must be at least 1, got {target}", file=sys.stderr)
        return EXIT_USAGE

    try:
        output = args.output or output_filename(args.country)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    if args.deadline is not None and args.deadline <= 0:
        parser.print_usage(sys.stderr)
        print(f"error: --deadline must be positive, got {args.deadline}", file=sys.stderr)
        return EXIT_USAGE

    try:
        app_settings = settings_from_args(args)
    except ValidationError as e:
        parser.print_usage(sys.stderr)
        for err in e.errors():
            field_name = '.'.join(str(part) for part in err['loc'])
            print(f"error: {field_name}: {err['msg']}", file=sys.stderr)
        return EXIT_USAGE

    available = [key for key in get_implemented_scrapers() if key in get_enabled_sites()]
    if app_settings.site not in available:
        print(f"error: unknown site '{app_settings.site}'. Available: "
              f"{', '.join(available)}", file=sys.stderr)
        return EXIT_USAGE

    try:
        configure_logging(app_settings.log_level, app_settings.log_format, app_settings.log_file)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    logger.info(Colors.cyan(f"Starting {app_settings.site} scraper"))
    logger.info(Colors.cyan(f"Country: {args.country}"))
    logger.info(Colors.cyan(f"Target number of hotels: {target}"))
    logger.info(Colors.cyan(f"Output file: {output}"))

    try:
        return asyncio.run(run_scrape(args.country, target, output, app_settings, deadline=args.deadline))
    except KeyboardInterrupt:
        return EXIT_CANCELLED


if __name__ == '__main__':
    sys.exit(main())
