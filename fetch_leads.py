#!/usr/bin/env python3
"""
Fetch website-client leads from the Profolio feed and print them as JSON.

Usage:
    python fetch_leads.py --type call --timestamp 2025-01-01T00:00:00
    python fetch_leads.py --type whatsapp --timestamp ... --skip-processed processed_leads.txt
"""

import sys
import json
import logging
import argparse

from bridge_config import config
from leads.service import fetch_leads, get_processed_leads

log_format = '%(asctime)s - %(levelname)s - %(message)s'
logging.basicConfig(level=getattr(logging, config.logging.level, logging.INFO), format=log_format)
logger = logging.getLogger(__name__)


def _lead_id(lead):
    if isinstance(lead, dict):
        return str(lead.get('id', lead.get('lead_id', '')))
    return str(lead)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Fetch Profolio website-client leads')
    parser.add_argument('--type', dest='lead_type', required=True, help='Lead type (call, whatsapp, email, ...)')
    parser.add_argument('--timestamp', required=True, help='Only leads created after this timestamp')
    parser.add_argument('--platform', default='bayut', help='Source platform label')
    parser.add_argument('--token', default=None, help='Profolio bearer token (defaults to PROFOLIO_AUTH_TOKEN)')
    parser.add_argument('--skip-processed', metavar='FILE', default=None,
                        help='Drop leads whose id is already listed in FILE')
    args = parser.parse_args(argv)

    config.log_config_summary()

    data = fetch_leads(args.lead_type, args.timestamp, args.token, args.platform)
    if data is None:
        logger.info("No leads returned")
        print(json.dumps([]))
        return 0

    if args.skip_processed and isinstance(data, list):
        processed = set(get_processed_leads(args.skip_processed))
        before = len(data)
        data = [lead for lead in data if _lead_id(lead) not in processed]
        logger.info(f"Skipped {before - len(data)} already processed leads")

    print(json.dumps(data, indent=2, ensure_ascii=False))
    return 0


if __name__ == '__main__':
    sys.exit(main())
