#!/usr/bin/env python3
"""
Accessibility Auditor - WCAG checks for rendered web pages.

Loads each page once, runs every check module against that snapshot, gives
every finding a stable id, applies ignore rules and writes the findings as
JSON.

Usage:
    a11y-audit --url https://example.com --output ./reports
    a11y-ignore --domain example.com --type missing_skip_links --expiry 2030-01-01
"""

import argparse
import asyncio
import json
import logging
import os
import re
import sys
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

from a11y_auditor import __version__
from a11y_auditor.auditor import AccessibilityAuditor, issues_by_category
from a11y_auditor.config import WCAG_LEVELS, AuditConfig
from a11y_auditor.errors import AuditError, IgnoreRuleError
from a11y_auditor.findings import AuditResult
from a11y_auditor.ignore import add_ignore_rule
from a11y_auditor.snapshot.browser import SnapshotBrowser
from a11y_auditor.snapshot.html import fetch_html, snapshot_from_html
from a11y_auditor.snapshot.models import PageSnapshot
from a11y_auditor.utils.constants import DEFAULT_IGNORE_FILE, DEFAULT_PAGE_TIMEOUT
from a11y_auditor.utils.log import (
    create_progress,
    print_error,
    print_info,
    print_status,
    print_success,
    print_warning,
    setup_logger,
)


MAX_URL_LENGTH = 2048
MIN_TIMEOUT = 5000
MAX_TIMEOUT = 120000

SUSPICIOUS_URL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (r'javascript:', r'data:', r'file:', r'ftp:', r'<script', r'<iframe', r'<object', r'<embed')
]

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_INVALID_RULE = 3


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='a11y-audit',
        description='Audit web pages for WCAG accessibility issues',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --url https://example.com
    %(prog)s --url https://example.com --url https://example.com/about --level AAA
    %(prog)s --html ./build/index.html --output ./reports
    %(prog)s --url https://example.com --static --skip-contrast
        """
    )

    source = parser.add_argument_group('pages')
    source.add_argument(
        '--url', '-u',
        action='append',
        default=[],
        help='URL of a page to audit (repeatable)'
    )

    source.add_argument(
        '--html',
        action='append',
        default=[],
        help='Local HTML file to audit statically (repeatable)'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        default='./reports',
        help='Output directory for findings (default: ./reports)'
    )

    parser.add_argument(
        '--level',
        type=str,
        default='AA',
        help='WCAG compliance level, AA or AAA (default: AA)'
    )

    parser.add_argument(
        '--skip-contrast',
        action='store_true',
        help='Skip color contrast and vision simulation checks'
    )

    parser.add_argument(
        '--skip-images',
        action='store_true',
        help='Skip image alternative text checks'
    )

    parser.add_argument(
        '--ignore-file',
        type=str,
        default=DEFAULT_IGNORE_FILE,
        help=f'Ignore rules file (default: {DEFAULT_IGNORE_FILE})'
    )

    parser.add_argument(
        '--timeout',
        type=int,
        default=DEFAULT_PAGE_TIMEOUT,
        help=f'Page load timeout in milliseconds (default: {DEFAULT_PAGE_TIMEOUT})'
    )

    parser.add_argument(
        '--static',
        action='store_true',
        help='Fetch raw HTML instead of rendering pages in a browser'
    )

    parser.add_argument(
        '--no-headless',
        action='store_true',
        help='Run browser in visible mode (useful for debugging)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    args = parser.parse_args(argv)
    if not args.url and not args.html:
        parser.error('at least one --url or --html is required')
    return args


def validate_url(url: str) -> str:
    """
    Validate an input URL.

    Args:
        url: URL string to validate

    Returns:
        The URL, stripped

    Raises:
        ValueError: If the URL is invalid or looks unsafe
    """
    url = url.strip()
    issues = []

    if len(url) > MAX_URL_LENGTH:
        issues.append(f'URL exceeds maximum length of {MAX_URL_LENGTH} characters')

    if not url.startswith(('http://', 'https://')):
        issues.append('URL must use http:// or https:// protocol')

    if any(pattern.search(url) for pattern in SUSPICIOUS_URL_PATTERNS):
        issues.append('URL contains potentially malicious content')

    if not issues and not urlparse(url).netloc:
        issues.append('URL has no host')

    if issues:
        raise ValueError(f"Invalid URL {url!r}: {', '.join(issues)}")
    return url


def clamp_timeout(timeout: int) -> int:
    return max(MIN_TIMEOUT, min(MAX_TIMEOUT, timeout))


def output_name(url: str) -> str:
    """Base name of the findings file for a page."""
    parsed = urlparse(url)
    if parsed.scheme == 'file' or not parsed.netloc:
        name = os.path.splitext(os.path.basename(parsed.path or url))[0]
    else:
        name = parsed.hostname or parsed.netloc
    return re.sub(r'[^A-Za-z0-9._-]+', '_', name) or 'page'


def print_banner() -> None:
    """Print the application banner."""
    banner = f"""
╔═══════════════════════════════════════════════════════════════╗
║                  ACCESSIBILITY AUDITOR v{__version__:<22}║
║             WCAG checks for rendered web pages                ║
╚═══════════════════════════════════════════════════════════════╝
    """
    print_status(banner, "bold cyan")


def print_summary(results: List[AuditResult]) -> None:
    """
    Print the audit summary.

    Args:
        results: Audit results, one per page
    """
    print("\n" + "=" * 60)
    print_success("AUDIT SUMMARY")
    print("=" * 60)
    for result in results:
        summary = result.summary
        print(f"  {result.url}")
        print(f"    Compliance:      {summary.compliance_level}")
        print(f"    Issues:          {summary.total_issues}")
        print(f"    Critical:        {summary.critical_issues}")
        print(f"    Warnings:        {summary.warnings}")
        print(f"    Contrast passes: {summary.passes}")
        if summary.ignored_issues:
            print(f"    Ignored:         {summary.ignored_issues}")
        if result.errors:
            print(f"    Check errors:    {len(result.errors)}")
        counts = {k: v for k, v in issues_by_category(result).items() if v}
        if counts:
            print("    By category:")
            for category, count in counts.items():
                print(f"      {category:<20} {count}")
    print("=" * 60 + "\n")


async def collect_snapshots(
    urls: List[str],
    html_files: List[str],
    static: bool,
    timeout: int,
    headless: bool
) -> Tuple[List[PageSnapshot], List[str]]:
    """
    Load every requested page once.

    Returns:
        Tuple of (snapshots, sources that failed to load)
    """
    snapshots: List[PageSnapshot] = []
    failed: List[str] = []

    for path in html_files:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                html = f.read()
        except OSError as e:
            print_error(f"Could not read {path}: {e}")
            failed.append(path)
            continue
        snapshots.append(snapshot_from_html(html, 'file://' + os.path.abspath(path)))

    if not urls:
        return snapshots, failed

    if static:
        for url in urls:
            html = await fetch_html(url, timeout=max(1, timeout // 1000))
            if html is None:
                failed.append(url)
                continue
            snapshots.append(snapshot_from_html(html, url))
        return snapshots, failed

    async with SnapshotBrowser(timeout=timeout, headless=headless) as browser:
        for url in urls:
            snapshot = await browser.snapshot(url)
            if snapshot is None:
                failed.append(url)
                continue
            snapshots.append(snapshot)
    return snapshots, failed


def write_findings(results: List[AuditResult], output_dir: str, level: str) -> List[str]:
    """
    Write findings as JSON, one file per host.

    Returns:
        Paths of the written files
    """
    os.makedirs(output_dir, exist_ok=True)
    grouped: Dict[str, List[AuditResult]] = OrderedDict()
    for result in results:
        grouped.setdefault(output_name(result.url), []).append(result)

    written = []
    generated_at = datetime.now(timezone.utc).isoformat()
    for name, page_results in grouped.items():
        path = os.path.join(output_dir, f"{name}_findings.json")
        document = {
            'generatedAt': generated_at,
            'wcagLevel': level,
            'pages': [r.to_dict() for r in page_results],
        }
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        written.append(path)
    return written


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the auditor.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level)

    if not args.quiet:
        print_banner()

    try:
        urls = [validate_url(u) for u in args.url]
        level = args.level.strip().upper()
        if level not in WCAG_LEVELS:
            raise ValueError(f"WCAG level must be one of {', '.join(WCAG_LEVELS)}")
        timeout = clamp_timeout(args.timeout)

        config = AuditConfig(
            wcag_level=level,
            skip_contrast=args.skip_contrast,
            skip_images=args.skip_images,
            ignore_file=args.ignore_file,
        )

        if not args.quiet:
            print_info(f"Pages: {len(urls) + len(args.html)}")
            print_info(f"WCAG level: {config.wcag_level}")
            print_info(f"Output: {args.output}")
            if args.skip_contrast:
                print_warning("Skipping contrast checks")
            if args.skip_images:
                print_warning("Skipping image checks")

        auditor = AccessibilityAuditor.from_config(config)

        snapshots, failed = await collect_snapshots(
            urls, args.html, args.static, timeout, headless=not args.no_headless
        )
        for source in failed:
            print_warning(f"Could not load {source}")

        if not snapshots:
            print_error("No pages could be loaded")
            return EXIT_ERROR

        results = []
        with create_progress() as progress:
            task = progress.add_task("Auditing pages", total=len(snapshots))
            for snapshot in snapshots:
                results.append(auditor.audit(snapshot))
                progress.advance(task)

        written = write_findings(results, args.output, config.wcag_level)

        if not args.quiet:
            print_summary(results)

        for path in written:
            print_success(f"Findings written to: {os.path.abspath(path)}")

        return EXIT_OK

    except KeyboardInterrupt:
        print_error("\nAudit interrupted by user")
        return EXIT_ERROR
    except ValueError as e:
        print_error(f"Invalid input: {e}")
        return EXIT_ERROR
    except Exception as e:
        print_error(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return EXIT_ERROR


def parse_ignore_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse a11y-ignore arguments."""
    parser = argparse.ArgumentParser(
        prog='a11y-ignore',
        description='Add a rule to the ignore file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --id 1a2b3c4d
    %(prog)s --domain example.com --type missing_skip_links --expiry 2030-01-01
    %(prog)s --url https://example.com/blog --category colorContrast --severity-at-most high
        """
    )
    parser.add_argument('--id', help='Finding id to ignore')
    parser.add_argument('--url', help='Only findings on URLs starting with this prefix')
    parser.add_argument('--domain', help='Only findings on this host or its subdomains')
    parser.add_argument('--category', help='Finding category, e.g. colorContrast')
    parser.add_argument('--type', help='Finding type, e.g. missing_alt_text')
    parser.add_argument('--selector', help='Substring of the finding selector')
    parser.add_argument('--text-includes', help='Substring of the finding text (case-insensitive)')
    parser.add_argument('--severity-at-most', help='Highest severity to ignore: low, medium, high, critical')
    parser.add_argument('--expiry', help='Date after which the rule stops applying (YYYY-MM-DD)')
    parser.add_argument(
        '--ignore-file',
        default=DEFAULT_IGNORE_FILE,
        help=f'Ignore rules file (default: {DEFAULT_IGNORE_FILE})'
    )
    return parser.parse_args(argv)


def ignore_main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for adding ignore rules.

    Returns:
        0 when the rule was added or already exists, 2 on usage errors,
        3 when the rule is invalid, 1 when the file cannot be read
    """
    try:
        args = parse_ignore_arguments(argv)
    except SystemExit as e:
        return EXIT_OK if e.code == 0 else EXIT_USAGE

    setup_logger(level=logging.WARNING)

    rule = {
        'id': args.id,
        'url': args.url,
        'domain': args.domain,
        'category': args.category,
        'type': args.type,
        'selector': args.selector,
        'textIncludes': args.text_includes,
        'severityAtMost': args.severity_at_most,
        'expiry': args.expiry,
    }
    rule = {k: v for k, v in rule.items() if v is not None}

    if not any(rule.get(k) for k in ('id', 'url', 'domain', 'category', 'type', 'selector')):
        print_error(
            "Usage: a11y-ignore --id <issueId> [--url <url>] [--domain <domain>] "
            "[--category <name>] [--type <type>] [--selector <css>] [--text-includes <substr>] "
            "[--severity-at-most <lvl>] [--expiry <YYYY-MM-DD>]"
        )
        return EXIT_USAGE

    try:
        added = add_ignore_rule(args.ignore_file, rule)
    except IgnoreRuleError as e:
        print_error(f"Invalid rule: {e}")
        return EXIT_INVALID_RULE
    except AuditError as e:
        print_error(str(e))
        return EXIT_ERROR

    if added:
        print_success(f"Ignore rule added to {os.path.abspath(args.ignore_file)}")
    else:
        print_info("Rule with this id already exists. No changes made.")
    return EXIT_OK


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(asyncio.run(main()))


def run_ignore() -> None:
    """Entry point wrapper for the ignore rule tool."""
    sys.exit(ignore_main())


if __name__ == '__main__':
    run()
