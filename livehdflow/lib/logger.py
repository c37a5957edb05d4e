# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import os
import sys
import logging
import argparse
from datetime import datetime
from pathlib import Path
from typing import Optional

from logging import ERROR as ERROR
from logging import WARNING as WARN
from logging import INFO as INFO
from logging import DEBUG as DEBUG

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

PACKAGE_LOGGER = "livehdflow"


class LoggerError(Exception):
    "Generic Error for Logger class"

    pass


class MaxSizeHandler(logging.Handler):
    """
    Logging handler that checks file size between writes.
    Throws RuntimeError if file size exceeds max_bytes.
    """

    def __init__(self, filename, max_bytes, mode="a"):
        super().__init__()
        self.filename = filename
        self.max_bytes = max_bytes
        self.mode = mode
        self.stream = None
        self._open_stream()

    def _open_stream(self):
        Path(self.filename).parent.mkdir(parents=True, exist_ok=True)
        self.stream = open(self.filename, self.mode)

    def emit(self, record):
        if os.path.getsize(self.filename) > self.max_bytes:
            error = "Error: Logger MaxSizeHandler file size exceeded" f"- wrote {os.path.getsize(self.filename)} / {self.max_bytes} bytes"
            raise RuntimeError(error)
        msg = self.format(record)
        if self.stream is None:
            raise RuntimeError("Stream is not open but emit was called")
        self.stream.write(msg + "\n")
        self.stream.flush()

    def close(self):
        if self.stream is not None:
            self.stream.close()
            self.stream = None
        super().close()


def default_log_path(directory: Optional[Path] = None) -> Path:
    "One log file per run, named after the time the run started"
    if directory is None:
        directory = Path.cwd()
    return directory / f"livehd_setup_{datetime.now():%Y%m%d_%H%M%S}.log"


def add_arguments(parser: argparse.ArgumentParser):
    """Add logger arguments to parser.

    :param parser: ArgumentParser to add logger arguments to
    :type parser: argparse.ArgumentParser
    """
    logger_parser = parser.add_argument_group("Logger", description="Arguments that affect Logger behavior")
    logger_parser.add_argument("--logger-level", dest="logger_level", type=str.upper, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logger level")
    logger_parser.add_argument("--logger-file", dest="logger_file", type=Path, default=None, help="Logger file path. Defaults to livehd_setup_<timestamp>.log in the current directory")
    logger_parser.add_argument("--logger-no-tee", dest="logger_tee", action="store_false", default=True, help="Do not tee log output. Default command line behavior is to tee to stderr")
    logger_parser.add_argument("--logger-no-timestamp", dest="logger_timestamp", action="store_false", default=True, help="Do not include timestamp in log messages")
    logger_parser.add_argument("--logger-max-file-size-gb", dest="logger_max_file_size_gb", type=int, default=1, help="Max size of log file in GB. Throws error if exceeded")
    logger_parser.add_argument("--logger-verbose", dest="verbose_logging", action="store_true", default=False, help="Enable verbose logging (filename, function name)")


def from_clargs(args: argparse.Namespace, default_logger_file: Optional[Path] = None) -> Path:
    "Initialize the package logger from command-line arguments. Returns the path of the log file in use"
    logger_file = args.logger_file
    if logger_file is None:
        logger_file = default_logger_file if default_logger_file is not None else default_log_path()
    init_logger(
        logger_file,
        level=args.logger_level,
        max_log_size=args.logger_max_file_size_gb,
        tee_to_stderr=args.logger_tee,
        logger_timestamp=args.logger_timestamp,
        verbose=args.verbose_logging,
    )
    return logger_file


def init_logger(log_path: Path, level: str = "INFO", max_log_size: int = 1, tee_to_stderr: bool = False, logger_timestamp: bool = True, verbose: bool = False) -> None:
    """
    Initializes the package logger. The log file is opened in append mode.

    :param log_path: Path to log file
    :type log_path: str or Path
    :param level: Logging level (DEBUG, INFO, WARNING, ERROR)
    :type level: str
    :param max_log_size: Maximum log file size in GB
    :type max_log_size: int
    :param tee_to_stderr: Also write log records to stderr
    :type tee_to_stderr: bool
    :param verbose: Enable verbose logging
    :type verbose: bool

    .. code-block:: python

        # Initializing for first time:
        from livehdflow.lib.logger import init_logger
        init_logger(log_path="livehd_setup.log", level="DEBUG", tee_to_stderr=True)

        # Subsequent times:
        import logging
        ...
        log = logging.getLogger(__name__)
        log.info("Hello, world!")
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    # If already configured, keep the existing handlers
    if any(not isinstance(h, logging.NullHandler) for h in logger.handlers):
        return

    default_fmt = "%(levelname)s %(name)s:%(lineno)d  %(message)s"
    verbose_fmt = "%(levelname)s %(name)s %(filename)s:%(lineno)d %(funcName)s(): %(message)s"
    if verbose:
        fmt = verbose_fmt
    else:
        fmt = default_fmt
    if logger_timestamp:
        fmt = "[%(asctime)s]" + fmt
    logger_format = logging.Formatter(fmt, datefmt="%Y-%m-%dT%H:%M:%S")
    logger.setLevel(INFO)

    if tee_to_stderr:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logger_format)
        logger.addHandler(stderr_handler)

    max_size_handler = MaxSizeHandler(
        filename=log_path,
        mode="a",
        max_bytes=int(1024 * 1024 * 1024 * max_log_size),
    )
    max_size_handler.setFormatter(logger_format)
    logger.addHandler(max_size_handler)

    logger.propagate = False
    logging.getLogger(__name__).info(f"Logger initialized, log file: {log_path}, log level: {level}")
    logger.setLevel(getattr(logging, level))


def close_logger():
    """
    Close and detach all logger handlers so the logger can be relaunched with a new file.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        handler.close()
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
    logger.setLevel(logging.WARNING)


def header(log: logging.Logger, title: str):
    "Log a section banner"
    rule = "=" * 59
    log.info(rule)
    log.info(f"  {title}")
    log.info(rule)


def success(log: logging.Logger, msg: str):
    log.log(SUCCESS, msg)
