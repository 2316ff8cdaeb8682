#!/usr/bin/env python3
"""
Conecta Rua - Generate Report Map
Fetches every report from Supabase and writes a standalone interactive map.
"""
import asyncio
import os
import sys
from collections import Counter

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv

# Load environment variables before the settings are read
load_dotenv()

from conecta_rua.backend import create_backend
from conecta_rua.core.config import get_settings
from conecta_rua.core.constants import get_category_label
from conecta_rua.core.logging import setup_logging
from conecta_rua.notifications import Notifier
from conecta_rua.reports import ReportStore
from conecta_rua.visualization import save_report_map


async def fetch_reports():
    backend = create_backend(get_settings())
    notifier = Notifier()
    try:
        store = ReportStore(backend.data, notifier)
        if not await store.refresh():
            for message in notifier.messages():
                print(f"ERROR: {message}")
            return None
        return store.reports
    finally:
        await backend.aclose()


def main():
    settings = get_settings()
    setup_logging(settings.log_level)

    if not settings.supabase_anon_key:
        print("ERROR: SUPABASE_ANON_KEY not found in .env file")
        sys.exit(1)

    print("=" * 60)
    print("Conecta Rua - Generating Report Map")
    print("=" * 60)
    print(f"\nFetching reports from {settings.supabase_url}...")

    reports = asyncio.run(fetch_reports())
    if reports is None:
        sys.exit(1)

    print(f"\nTotal reports found: {len(reports)}")

    by_category = Counter(r.category for r in reports)
    for category, count in by_category.most_common():
        print(f"  {get_category_label(category)}: {count}")

    output_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "conecta_rua_map.html")
    save_report_map(reports, output_path)

    print(f"\nMap saved to: {output_path}")
    print("Open this file in your browser to view the interactive map.")


if __name__ == "__main__":
    main()
