"""
run_verifier.py - Main Application Entry Point
===============================================
Command-line front end for the certificate verifier.

What it does:
-------------
1. Loads configuration from environment variables (.env file)
2. Looks up one or more admit numbers given on the command line, or
3. Reads a whole Excel/CSV file of admit numbers and writes a results CSV

All lookups in one run share the same cache, so a file with thousands of
admit numbers downloads the spreadsheet only once.

Usage:
------
    python -m verifier.run_verifier A100
    python -m verifier.run_verifier A100 B200 --stats
    python -m verifier.run_verifier --input admits.xlsx --output-dir reports

Command Line Options:
---------------------
    admit_numbers   : Admit numbers to look up (optional if --input is given)
    --input         : Excel (.xlsx, .xls) or CSV file with an admit number column
    --output-dir    : Directory for the results CSV (default: "out")
    --stats         : Show per-sheet record counts after loading
    --debug         : Enable debug logging for troubleshooting
"""

import sys
import logging
import time
import csv
import argparse
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List

from .config import load_settings
from .errors import EmptyDataset, NotFound, ValidationError, VerifierError
from .loader import load_admit_numbers
from .service import CertificateVerifier


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

LOG_LEVEL = logging.INFO

# Default output directory for result CSV files
OUTPUT_DIR = "out"

# Columns of the batch results CSV
RESULT_FIELDS = [
    'InputRow',
    'AdmitNumber',
    'Found',
    'StudentName',
    'FatherName',
    'MotherName',
    'Institution',
    'Course',
    'Result',
    'SourceSheet',
    'Note',
    'CheckedAt',
]


# =============================================================================
# LOGGING SETUP
# =============================================================================

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%H:%M:%S'
)

logger = logging.getLogger(__name__)


# =============================================================================
# CORE LOOKUP FUNCTION
# =============================================================================

def verify_row(verifier: CertificateVerifier, row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Look up one admit number and build its results CSV row.

    Validation failures and missing records become rows with Found=False.
    Fetch failures are not caught here: if the spreadsheet cannot be read,
    every following row would fail the same way, so the caller stops.
    """
    admit_number = row.get('ADMIT_NO', '')
    result = {
        "InputRow": row.get('InputRow'),
        "AdmitNumber": admit_number,
        "Found": False,
        "Note": "",
        "CheckedAt": datetime.now().isoformat(),
    }

    try:
        record = verifier.search(admit_number)
    except (ValidationError, NotFound, EmptyDataset) as e:
        result["Note"] = verifier.describe_error(e)
        return result

    result.update(record.as_dict())
    # as_dict() returns the stored (possibly differently cased) admit number
    result["AdmitNumber"] = admit_number
    result["Found"] = True
    result["Note"] = f"Found in {record.source_table}"
    return result


# =============================================================================
# OUTPUT FUNCTIONS
# =============================================================================

def write_results_to_csv(results: List[Dict[str, Any]], output_path: Path):
    """Write batch results to a CSV file."""
    if not results:
        logger.warning("No results to write")
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=RESULT_FIELDS, extrasaction='ignore')
        writer.writeheader()
        writer.writerows(results)

    logger.info(f"Results written to {output_path.resolve()}")


def log_record(verifier: CertificateVerifier, admit_number: str):
    """Look up a single admit number and log the outcome."""
    try:
        record = verifier.search(admit_number)
    except (ValidationError, NotFound, EmptyDataset) as e:
        logger.info(f"{admit_number}: {verifier.describe_error(e)}")
        return

    logger.info("-" * 50)
    for label, value in record.as_dict().items():
        logger.info(f"{label:<12}: {value}")
    logger.info("-" * 50)


# =============================================================================
# COMMAND LINE ARGUMENT PARSING
# =============================================================================

def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description='Verify student certificates by admit number',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m verifier.run_verifier A100
  python -m verifier.run_verifier --input admits.xlsx
  python -m verifier.run_verifier A100 --stats --debug
        """
    )

    parser.add_argument(
        'admit_numbers',
        nargs='*',
        help='Admit numbers to look up'
    )
    parser.add_argument(
        '--input',
        help='Excel (.xlsx, .xls) or CSV file of admit numbers to verify in batch'
    )
    parser.add_argument(
        '--output-dir',
        default=OUTPUT_DIR,
        help=f'Directory for output CSV (default: {OUTPUT_DIR})'
    )
    parser.add_argument(
        '--stats',
        action='store_true',
        help='Show cache status and records per sheet'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)
    if not args.admit_numbers and not args.input:
        parser.error("give at least one admit number or --input FILE")
    return args


# =============================================================================
# MAIN EXECUTION FUNCTION
# =============================================================================

def run_verifier(argv=None) -> int:
    """
    Main execution logic.

    Returns:
        Process exit code: 0 on success, 1 on a fatal error.
    """
    args = parse_arguments(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    results = []
    verifier = None
    output_path = None

    try:
        # ---------------------------------------------------------------------
        # STEP 1: Load configuration and build the verifier
        # ---------------------------------------------------------------------
        settings = load_settings()
        logger.info(f"Spreadsheet: {settings.spreadsheet_id}")
        verifier = CertificateVerifier(settings)

        # ---------------------------------------------------------------------
        # STEP 2: Command-line admit numbers
        # ---------------------------------------------------------------------
        for admit_number in args.admit_numbers:
            log_record(verifier, admit_number)

        # ---------------------------------------------------------------------
        # STEP 3: Batch file
        # ---------------------------------------------------------------------
        if args.input:
            logger.info(f"Loading admit numbers from {args.input}...")
            input_rows = load_admit_numbers(args.input, settings.excel_header_row)
            logger.info(f"Loaded {len(input_rows)} rows")

            output_path = Path(args.output_dir) / f"verified_{datetime.now():%Y%m%d_%H%M%S}.csv"
            start_time = time.time()

            for i, row in enumerate(input_rows):
                if i > 0 and i % 100 == 0:
                    logger.info(f"Progress: {i}/{len(input_rows)} ({i/len(input_rows)*100:.1f}%)")
                results.append(verify_row(verifier, row))

            found = sum(1 for r in results if r['Found'])
            logger.info("-" * 50)
            logger.info(f"Processing complete in {time.time() - start_time:.1f} seconds")
            logger.info(f"Total Rows: {len(results)}")
            logger.info(f"Found: {found}")
            logger.info(f"Not found / invalid: {len(results) - found}")
            logger.info("-" * 50)

            write_results_to_csv(results, output_path)

        # ---------------------------------------------------------------------
        # STEP 4: Optional statistics
        # ---------------------------------------------------------------------
        if args.stats:
            logger.info(verifier.cache_status().describe())
            for sheet, count in (verifier.statistics() or {}).items():
                logger.info(f"  {sheet}: {count} records")

        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user. Saving partial results...")
        if results and output_path:
            write_results_to_csv(results, output_path.with_name("partial_" + output_path.name))
        return 1

    except VerifierError as e:
        # The spreadsheet could not be read (after retries)
        logger.error(f"Fatal error: {e}")
        if verifier:
            logger.error(verifier.describe_error(e))
        if results and output_path:
            write_results_to_csv(results, output_path.with_name("partial_" + output_path.name))
        return 1

    except (RuntimeError, FileNotFoundError, ValueError) as e:
        # Configuration or input file errors
        logger.error(f"Fatal error: {e}")
        return 1

    finally:
        if verifier:
            verifier.close()


def main():
    sys.exit(run_verifier())


# =============================================================================
# SCRIPT ENTRY POINT
# =============================================================================

if __name__ == '__main__':
    main()
