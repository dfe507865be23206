#!/usr/bin/env python
"""
Caption Scout Worker

Runs continuously: once a day at SCOUT_WORK_HOUR it spends the daily
YouTube quota on search pages, keeps videos with human captions in every
required language, and appends their ids to the ledger.

Usage:
    python scripts/caption_worker.py            # first run prompts for authorization
    python scripts/caption_worker.py --headless # token.json must already exist
    python scripts/caption_worker.py --once     # run one session and exit

Exit codes:
    0 - Finished (--once only)
    1 - Startup failure (configuration or credentials)
"""

import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from scout.worker import load_config, run_worker

# Configure logging
logging.basicConfig(
    level=getattr(logging, os.environ.get('LOG_LEVEL', 'INFO').upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
# Silence discovery document cache warnings
logging.getLogger('googleapiclient.discovery_cache').setLevel(logging.WARNING)
logger = logging.getLogger('caption_worker')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Daily caption scout worker")
    parser.add_argument('--once', action='store_true', help="run a single session and exit")
    parser.add_argument('--headless', action='store_true', help="never prompt for authorization")
    return parser.parse_args(argv)


def main(argv=None):
    """Entry point for the caption scout worker."""
    args = parse_args(argv)

    config = load_config()
    if config is None:
        return 1

    try:
        return run_worker(config, once=args.once, headless=args.headless)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 0


if __name__ == '__main__':
    sys.exit(main())
