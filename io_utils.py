# io_utils.py - pipecutter ver1.0
# Reading order files, parsing config, naming output files.

import os
import re
import zlib
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from models import Catalog, Customer, Order


DEFAULT_OUTPUT_PREFIX = "optimized_"
OUTPUT_SUFFIX = ".out"
ERROR_SUFFIX = ".err"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

MIN_CUSTOMER_FIELDS = 2
MAX_CUSTOMER_FIELDS = 7

_ALPHA = re.compile(r"^[^\W\d_]+$")
_INTEGER = re.compile(r"^[0-9]+$")
_DECIMAL = re.compile(r"^[0-9]*\.?[0-9]+$")


class FileAccessError(OSError):
    """Input path missing or unreadable."""


class OrderFormatError(ValueError):
    """Order text could not be turned into an Order."""


# ------------------------------
# Boolean parser
# ------------------------------

def parse_bool(val: str) -> bool:
    if val is None:
        return False
    v = val.strip().lower()
    return v in ("1", "true", "yes", "y", "on")


# ------------------------------
# Config parser (strict one key per line)
# ------------------------------

def parse_properties(path: str) -> Dict[str, str]:
    """
    Conservative parser:
    - One key=value per line
    - Lines without '=' are ignored
    - '#' at start of line = comment
    """
    props: Dict[str, str] = {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                props[key.strip()] = val.strip()
    except OSError as e:
        raise FileAccessError(f"Could not read config file: {path}") from e
    return props


def parse_stock_lengths(val: str) -> Catalog:
    try:
        lengths = [float(x) for x in val.replace(";", ",").split(",") if x.strip()]
    except ValueError:
        raise ValueError(f"stock-lengths must be a comma separated list of numbers, got '{val}'")
    return Catalog(lengths)


@dataclass
class RunSettings:
    catalog: Catalog
    output_prefix: str = DEFAULT_OUTPUT_PREFIX
    overwrite: bool = False
    stock_cost: float = 0.0
    currency: str = "EUR"
    log_level: str = "INFO"


def parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log-level '{value}', expected one of {', '.join(LOG_LEVELS)}")
    return level


def settings_from_properties(props: Dict[str, str]) -> RunSettings:
    return RunSettings(
        catalog=parse_stock_lengths(props.get("stock-lengths", "2,3,4,5")),
        output_prefix=props.get("output-prefix", DEFAULT_OUTPUT_PREFIX),
        overwrite=parse_bool(props.get("overwrite", "false")),
        stock_cost=float(props.get("stock-cost", "0")),
        currency=props.get("currency", "EUR"),
        log_level=parse_log_level(props.get("log-level", "INFO")),
    )


# ------------------------------
# Jobs
# ------------------------------

@dataclass
class OrderJob:
    """
    One input file. Carries either a parsed order or the diagnostic
    explaining why there is none. path=None marks end of input.
    """
    path: Optional[str]
    order: Optional[Order] = None
    error: str = ""

    @classmethod
    def end_of_input(cls) -> "OrderJob":
        return cls(path=None)

    @property
    def is_end(self) -> bool:
        return self.path is None


# ------------------------------
# Output naming
# ------------------------------

def output_base(path: str, prefix: str = DEFAULT_OUTPUT_PREFIX) -> str:
    """<dir>/<prefix><stem> for an input path."""
    directory, filename = os.path.split(path)
    stem, _ = os.path.splitext(filename)
    return os.path.join(directory, prefix + stem)


def output_path(path: str, failed: bool, prefix: str = DEFAULT_OUTPUT_PREFIX) -> str:
    return output_base(path, prefix) + (ERROR_SUFFIX if failed else OUTPUT_SUFFIX)


def has_output(path: str, prefix: str = DEFAULT_OUTPUT_PREFIX) -> bool:
    base = output_base(path, prefix)
    return os.path.isfile(base + OUTPUT_SUFFIX) or os.path.isfile(base + ERROR_SUFFIX)


# ------------------------------
# Input discovery
# ------------------------------

def discover_order_files(source: str, prefix: str = DEFAULT_OUTPUT_PREFIX,
                         overwrite: bool = False) -> List[str]:
    """
    A single file, or the regular files directly inside a directory.
    Our own outputs (prefixed) and inputs that already have one are skipped.
    """
    if not os.path.exists(source):
        raise FileAccessError(f"Filepath does not exist: {source}")

    if os.path.isfile(source):
        candidates = [source]
    else:
        try:
            names = sorted(os.listdir(source))
        except OSError as e:
            raise FileAccessError(f"Could not list directory: {source}") from e
        candidates = [
            os.path.join(source, n) for n in names
            if os.path.isfile(os.path.join(source, n)) and not n.lower().startswith(prefix.lower())
        ]

    if overwrite:
        return candidates
    return [p for p in candidates if not has_output(p, prefix)]


def read_lines(path: str) -> List[str]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except UnicodeDecodeError as e:
        raise OrderFormatError(f"not a UTF-8 text file (byte {e.start})") from e
    except OSError as e:
        raise FileAccessError(f"Could not read file: {path}") from e


# ------------------------------
# Order text
# ------------------------------

def customer_id_for(name: str) -> int:
    """Stable non-negative id derived from a customer name."""
    return zlib.crc32(name.strip().lower().encode("utf-8")) & 0x7FFFFFFF


def parse_customer_line(line: str) -> Optional[Customer]:
    """
    'Max,Mustermann,42' -> Customer(42, 'Max Mustermann').
    'Max,Mustermann'    -> Customer(<derived id>, 'Max Mustermann').
    Returns None when the line is not a customer line.
    """
    fields = [x.strip() for x in line.split(",")]
    if not (MIN_CUSTOMER_FIELDS <= len(fields) <= MAX_CUSTOMER_FIELDS):
        return None
    if not all(_ALPHA.match(x) for x in fields[:-1]):
        return None

    last = fields[-1]
    if _INTEGER.match(last):
        return Customer(int(last), " ".join(fields[:-1]))
    if _ALPHA.match(last):
        name = " ".join(fields)
        return Customer(customer_id_for(name), name)
    return None


def parse_item_line(line: str) -> List[Tuple[int, float]]:
    """'2*1.5; 1*2.5' -> [(2, 1.5), (1, 2.5)]."""
    items: List[Tuple[int, float]] = []
    for token in line.split(";"):
        token = token.strip()
        if not token:
            continue
        parts = [x.strip() for x in token.split("*")]
        if len(parts) != 2 or not _INTEGER.match(parts[0]) or not _DECIMAL.match(parts[1]):
            raise OrderFormatError(f"Malformed item '{token}', expected quantity*length")
        qty, length = int(parts[0]), float(parts[1])
        if qty <= 0 or length <= 0:
            raise OrderFormatError(f"Item '{token}' needs a positive quantity and length")
        items.append((qty, length))
    return items


def _strip_comment(line: str) -> str:
    if "#" in line:
        line = line[:line.index("#")]
    return line.strip()


def parse_order_lines(lines: List[str]) -> Order:
    """
    Raises OrderFormatError for empty input, unreadable lines or a file
    without order items.
    """
    if not lines:
        raise OrderFormatError("input data is empty!")

    customer: Optional[Customer] = None
    items: List[Tuple[int, float]] = []

    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#") or (len(line) > 1 and line.startswith('"') and line.endswith('"')):
            continue
        line = _strip_comment(line)
        if not line:
            continue

        if ";" in line or ("*" in line and "," not in line):
            try:
                items.extend(parse_item_line(line))
            except OrderFormatError as e:
                raise OrderFormatError(f"line {number}: {e}")
            continue

        if "," in line and customer is None:
            customer = parse_customer_line(line)
            if customer is not None:
                continue

        raise OrderFormatError(f"line {number}: unrecognized content '{line}'")

    if not items:
        raise OrderFormatError("No orders found")

    order = Order(customer)
    for qty, length in items:
        order.add_item(length, qty)
    return order


def read_order_job(path: str) -> OrderJob:
    """Parse one order file; format problems are kept on the job."""
    try:
        order = parse_order_lines(read_lines(path))
    except OrderFormatError as e:
        return OrderJob(path=path, order=None, error=str(e))
    return OrderJob(path=path, order=order)
