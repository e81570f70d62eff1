import csv
import logging
import os
import sys

from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "PAYMENTS_LOG_LEVEL"


def configure_logging() -> None:
    logging.basicConfig(
        level=os.environ.get(LOG_LEVEL_ENV, "WARNING").upper(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) > 1:
        print("Usage: python main.py [input.csv]", file=sys.stderr)
        return 1

    configure_logging()
    engine = PaymentsEngine()
    try:
        if argv:
            engine.process_file(argv[0])
        else:
            engine.process_stream(sys.stdin)
        engine.write_report(sys.stdout)
    except (OSError, csv.Error) as e:
        logger.error(f"Processing aborted: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
