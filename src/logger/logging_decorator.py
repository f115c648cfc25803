"""
Logging setup and stage decorator for the episode generation pipeline.

Every subsystem logs to its own named logger ("pipeline", "llm", "tts",
"storage", "database") writing to ``{LOG_DIR}/{name}.log``. The console is only
used when verbose mode is requested (CLI ``--verbose``).

Usage:
    from src.logger import setup_logging, log_function

    logger = setup_logging("pipeline", verbose=True)

    @log_function(logger_name="pipeline", log_args=True)
    def run_summary_step(job_id):
        ...
"""

import functools
import logging
import os
import time
from pathlib import Path
from typing import Optional, Callable, Any


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def default_log_file(logger_name: str) -> str:
    """Return the log file path used for ``logger_name`` (honours LOG_DIR)."""
    log_dir = os.getenv("LOG_DIR", "logs")
    return str(Path(log_dir) / f"{logger_name}.log")


def setup_logging(
    logger_name: str,
    log_file: Optional[str] = None,
    verbose: bool = False,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Configure a named logger with a file handler and an optional console handler.

    Calling it again for an already configured logger only adds the console
    handler when ``verbose`` is newly requested, so modules can call it at import
    time and the CLI can still switch console output on later.

    Args:
        logger_name: Name of the logger (e.g. "pipeline")
        log_file: Path of the log file (default: ``{LOG_DIR}/{logger_name}.log``)
        verbose: If True, also log DEBUG and above to the console
        level: Level of the file handler (default: logging.INFO)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)

    if verbose and not _has_console_handler(logger):
        logger.setLevel(logging.DEBUG)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        logger.addHandler(console_handler)

    if any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        return logger

    if not verbose:
        logger.setLevel(level)

    log_path = Path(log_file or default_log_file(logger_name))
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    return logger


def _has_console_handler(logger: logging.Logger) -> bool:
    return any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    )


def log_function(
    logger_name: Optional[str] = None,
    level: int = logging.INFO,
    log_args: bool = False,
    log_result: bool = False,
    log_execution_time: bool = True,
) -> Callable:
    """
    Decorator logging entry, completion and exceptions of a pipeline function.

    Exceptions are logged with their traceback and re-raised unchanged, so the
    caller keeps full control of error handling.

    Args:
        logger_name: Logger to use (default: the decorated function's module)
        level: Level of the entry/exit messages
        log_args: Log positional and keyword arguments
        log_result: Log the return value
        log_execution_time: Append the duration to the completion message

    Example:
        @log_function(logger_name="pipeline", log_args=True)
        def run_assembly_stage(job_id, chunks):
            ...
    """

    def decorator(func: Callable) -> Callable:
        name = logger_name or func.__module__

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            logger = logging.getLogger(name)
            if not logger.handlers:
                logger = setup_logging(name, level=level)

            func_name = func.__name__
            log_msg = f"Calling {func_name}"
            if log_args and (args or kwargs):
                args_repr = [repr(a) for a in args]
                kwargs_repr = [f"{k}={v!r}" for k, v in kwargs.items()]
                log_msg += f" with args: {', '.join(args_repr + kwargs_repr)}"
            logger.log(level, log_msg)

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                execution_time = time.time() - start_time
                logger.error(
                    f"Exception in {func_name} after {execution_time:.2f}s: {type(e).__name__}: {e}",
                    exc_info=True,
                )
                raise

            completion_msg = f"Completed {func_name}"
            if log_execution_time:
                completion_msg += f" in {time.time() - start_time:.2f}s"
            if log_result:
                completion_msg += f" with result: {result!r}"
            logger.log(level, completion_msg)

            return result

        return wrapper

    return decorator
