import argparse
import json
import logging
import os
import random
import sys

from sheet_analyst.lib.locale_detect import detect_locale
from sheet_analyst.lib.models import AUTO_LOCALE, Dataset
from sheet_analyst.lib.workbook_io import read_workbook_file
from sheet_analyst.query_engine import QueryEngine


def main() -> int:
    parser = argparse.ArgumentParser(description="Answer one natural-language question about a spreadsheet offline.")
    parser.add_argument("--file", required=True, help="Path to .xlsx/.xls/.csv/.tsv/.json file.")
    parser.add_argument("--query", required=True, help="Question text, e.g. 'what is the average of score'.")
    parser.add_argument("--sheet", default="", help="Sheet to query. Defaults to the first sheet.")
    parser.add_argument("--locale", default=AUTO_LOCALE, help="en-US, de-DE or auto.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for follow-up question sampling.")
    parser.add_argument("--verbose", action="store_true", help="Log engine events to stderr.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if not os.path.exists(args.file):
        print(f"File not found: {args.file}", file=sys.stderr)
        return 2

    query = str(args.query or "").strip()
    if not query:
        print("Query is empty.", file=sys.stderr)
        return 2

    dataset = read_workbook_file(args.file)
    if args.sheet:
        if args.sheet not in dataset.sheets:
            print(f"Sheet not found: {args.sheet}. Available: {', '.join(dataset.sheets)}", file=sys.stderr)
            return 2
        dataset = Dataset(sheets=dataset.sheets, active_sheet=args.sheet)

    locale = detect_locale(query) if args.locale == AUTO_LOCALE else args.locale
    engine = QueryEngine(rng=random.Random(args.seed))
    result = engine.execute(query, dataset, locale)
    print(json.dumps(result.to_wire(), ensure_ascii=False, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
