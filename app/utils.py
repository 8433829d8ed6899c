import base64
import logging
import math
import re
import threading
import json
import os
import tempfile
from datetime import datetime, timezone

# Global lock for all JSON writes in this process
_json_write_lock = threading.Lock()

_WHITESPACE_RE = re.compile(r'\s+')
_LEADING_FLOAT_RE = re.compile(r'[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?')


# Custom logging formatter to support colors
class ColoredFormatter(logging.Formatter):
    # Define color codes
    COLORS = {
        'DEBUG': '\033[94m',   # Blue
        'INFO': '\033[92m',    # Green
        'WARNING': '\033[93m', # Yellow
        'ERROR': '\033[91m',   # Red
        'CRITICAL': '\033[95m' # Magenta
    }
    RESET = '\033[0m'  # Reset color

    def format(self, record):
        # Add color to the log level name
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"

        return super().format(record)


# Filter to remove date from http access logs
class FilterRemoveDateFromWerkzeugLogs(logging.Filter):
    # '192.168.0.102 - - [30/Jun/2024 01:14:03] "%s" %s %s' -> '192.168.0.102 - "%s" %s %s'
    pattern: re.Pattern = re.compile(r' - - \[.+?] "')

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.pattern.sub(' - "', record.msg)
        return True


def safe_write_json(path, data, **dump_kwargs):
    with _json_write_lock:
        dirpath = os.path.dirname(path) or "."
        os.makedirs(dirpath, exist_ok=True)
        # Default options
        options = {'ensure_ascii': False, 'indent': 2}
        options.update(dump_kwargs)

        # Create temporary file in same directory
        with tempfile.NamedTemporaryFile("w", dir=dirpath, delete=False, encoding="utf-8") as tmp:
            tmp_path = tmp.name
            json.dump(data, tmp, **options)
            tmp.flush()
            os.fsync(tmp.fileno())  # flush to disk
        # Atomically replace target file
        os.replace(tmp_path, path)


def now_utc():
    """Returns current datetime in UTC (aware)"""
    return datetime.now(timezone.utc)


def epoch_millis(dt=None):
    """Milliseconds since the epoch for dt (defaults to now)"""
    dt = dt or now_utc()
    return int(dt.timestamp() * 1000)


def slugify_name(name):
    """'Rose  Garden Co' -> 'rose_garden_co'"""
    return _WHITESPACE_RE.sub('_', (name or '').lower())


def encode_storage_key(value):
    """Stable base64 encoding of an arbitrary string, used for storage keys"""
    return base64.b64encode(value.encode('utf-8')).decode('ascii')


def parse_float(value, default=None):
    """
    Leading number of a text field, e.g. '1500 LKR' -> 1500.0.
    Returns default when the text does not start with a number.
    """
    if value is None:
        return default
    match = _LEADING_FLOAT_RE.match(str(value).strip())
    if not match:
        return default
    try:
        number = float(match.group(0))
    except ValueError:
        return default
    # 1e999 overflows to inf, which JSON cannot carry
    return number if math.isfinite(number) else default
