#! /usr/bin/env python3

# snift.py
import argparse
import asyncio
import logging
import sys

from checks import report
from checks.errors import CatalogError, SniftError
from checks.scoring import ScoreEngine
from checks.settings import Settings


async def process_url(engine, url):
    """Score a single URL and return the flat result dict."""
    result = await engine.compute_score(url)
    return result.to_dict()


async def process_urls(engine, urls, output, concurrency=10):
    """Score multiple URLs with controlled concurrency using asyncio."""
    semaphore = asyncio.Semaphore(concurrency)

    async def process_with_semaphore(url):
        async with semaphore:
            return await process_url(engine, url)

    if output == "stdout":
        # For stdout, print results as they complete
        for url in urls:
            try:
                result = await process_with_semaphore(url)
            except SniftError as e:
                report.output_message("[!]", f"{url}: {e}", "error")
                continue
            report.printer(**result)
        return []

    tasks = [process_with_semaphore(u) for u in urls]
    results = await asyncio.gather(*tasks, return_exceptions=True)
    clean_results = []
    for i, r in enumerate(results):
        if isinstance(r, SniftError):
            logging.error("Failed to score %s: %s", urls[i], r)
        elif isinstance(r, BaseException):
            raise r
        else:
            clean_results.append(r)
    return clean_results


def main():
    parser = argparse.ArgumentParser(
        description="Snift: Website Security Score. "
        "Inspect a website's protocol, response headers, TLS certificate, "
        "SPF/DMARC records and disclosed incidents, and reduce them to a 0-1 score."
    )

    # --- Mode selection ---
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Launch the REST API server",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the web server (default: 8080, used with --serve)",
    )

    # --- URL selection (not required if --serve) ---
    group = parser.add_mutually_exclusive_group(required=False)
    group.add_argument("-u", "--url", type=str, help="Single URL to score.")
    group.add_argument(
        "-iL", type=str, help="File containing a list of URLs to score."
    )
    parser.add_argument(
        "-o",
        type=str,
        choices=["stdout", "xls", "json", "csv", "md"],
        default="stdout",
        help="Output format: stdout, xls, json, csv, or md (default: stdout).",
    )
    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=10,
        help="Maximum concurrent URL scans (default: 10)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose/debug logging output",
    )

    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # --- Web server mode ---
    if args.serve:
        import uvicorn
        from api.app import app as web_app

        print("\nSnift API")
        print(f"   http://localhost:{args.port}")
        print(f"   API docs: http://localhost:{args.port}/docs\n")
        uvicorn.run(web_app, host="0.0.0.0", port=args.port, log_level="info")
        return

    # --- CLI scan mode (requires -u or -iL) ---
    if not args.url and not args.iL:
        parser.error("CLI mode requires -u or -iL (or use --serve for web mode)")

    if args.url:
        urls = [args.url]
    else:
        with open(args.iL, "r") as file:
            urls = [line.strip() for line in file if line.strip()]

    # A broken server catalog is fatal at start-up
    try:
        engine = ScoreEngine(settings=Settings.from_env())
    except CatalogError as e:
        logging.critical("%s", e)
        sys.exit(1)

    results = asyncio.run(
        process_urls(engine, urls, args.o, concurrency=args.concurrency)
    )

    if args.o == "xls" and results:
        report.write_to_excel(results)
        print("Results written to output.xlsx")
    elif args.o == "json" and results:
        report.output_json(results)
    elif args.o == "csv" and results:
        report.write_to_csv(results)
        print("Results written to output.csv")
    elif args.o == "md" and results:
        report.write_to_markdown(results)
        print("Results written to output.md")


if __name__ == "__main__":
    main()
