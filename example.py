# example.py
# A small example demonstrating how to use the a11y_crawler
# library to audit a handful of pages and look at the worst problems.

import asyncio
import logging

from a11y_crawler import crawl_site, render_markdown, summarize

# --- Configuration ---
# You can enable logging to see the crawler's progress and decisions.
# This is helpful for debugging.
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

# The site you want to audit. Only pages on the same origin are visited.
TARGET_URL = "https://example.com"


async def main():
    """
    Main function to run the crawl, print the worst issues, and show the report.
    """
    print(f"[*] Starting accessibility crawl for: {TARGET_URL}\n")

    # This is the primary API call. It handles everything:
    # - Launching a headless Chromium.
    # - Walking same-origin links, depth first, up to max_pages pages.
    # - Running axe-core on every page (and Lighthouse, if enabled).
    # The function returns a single `CrawlSession` object.
    session = await crawl_site(TARGET_URL, max_pages=5)

    summary = summarize(session)
    print("\n--- CRAWL COMPLETE ---")
    print(f"Pages analyzed: {summary.pages}")
    print(f"Violations: {summary.total_violations} (critical: {summary.critical})")

    if session.errors:
        print("\n--- Pages Not Analyzed ---")
        for error in session.errors:
            print(f"- {error}")

    # Critical issues first, one line per page and rule.
    for result in session.results:
        for issue in result.issues:
            if issue.severity == "critical":
                print(f"[critical] {result.url}: {issue.help} ({len(issue.elements)} element(s))")

    # The same markdown the CLI writes to disk.
    print()
    print(render_markdown(session, summary))


if __name__ == "__main__":
    # The library is async, so we use asyncio.run() to start it.
    asyncio.run(main())
