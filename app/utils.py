import logging
import re
import threading
import json
import os
import tempfile
import time

# Global lock for all JSON writes in this process
_json_write_lock = threading.Lock()

_NUMBER_PATTERN = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')


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


def to_number(value):
    """
    Coerce a value to a number when it looks like one.

    Returns:
        int/float, or None when the value is not numeric (None, blank strings,
        booleans and free text all return None)
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    if not text or not _NUMBER_PATTERN.match(text):
        return None
    number = float(text)
    return int(number) if number.is_integer() and '.' not in text and 'e' not in text.lower() else number


def is_yes(value):
    return isinstance(value, str) and value.strip().lower() == 'yes'


def safe_write_json(path, data, **dump_kwargs):
    with _json_write_lock:
        dirpath = os.path.dirname(path) or "."
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




def now_ms():
    """Epoch milliseconds, the timestamp format of the articles tables"""
    return int(time.time() * 1000)
