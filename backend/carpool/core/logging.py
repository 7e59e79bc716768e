import logging
import re

# Access lines that repeat every few seconds per client: health probes and
# driver location reports.
QUIET_ACCESS = re.compile(r'"(GET /health|PUT /rides/[^/ ]+/location) ')


class QuietAccessFilter(logging.Filter):
    def __init__(self, pattern=QUIET_ACCESS):
        super().__init__()
        self.pattern = pattern

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno > logging.INFO:
            return True
        return not self.pattern.search(record.getMessage())


def setup_logging(level: str = "INFO"):
    level = level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("carpool").setLevel(level)
    # keep the location churn when debugging
    if level != "DEBUG":
        logging.getLogger("uvicorn.access").addFilter(QuietAccessFilter())
