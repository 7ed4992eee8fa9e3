from pathlib import Path
from rich.console import Console
from loguru import logger

__all__ = [
    "ROOT",
    "console",
    "logger",
    "setup_file_logging",
]

ROOT = Path(__file__).parent.parent.resolve()
console = Console()

# Remove Loguru's default stdout sink to prevent terminal output
logger.remove()

log_format = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS zz}</green> | <level>{level: <8}</level> | <yellow>Line {line: >4} ({file}):</yellow> <b>{message}</b>"


def setup_file_logging(log_dir: str | Path = ".filegate") -> list[int]:
    """Send debug and info logs to files under ``log_dir``.

    Args:
        log_dir: Directory for ``debug.log`` and ``info.log``; created if missing

    Returns:
        The loguru sink ids, so callers can remove them again
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    sink_ids = []
    for level, filename in (("DEBUG", "debug.log"), ("INFO", "info.log")):
        sink_ids.append(
            logger.add(
                log_path / filename,
                level=level,
                format=log_format,
                colorize=False,
                backtrace=True,
                diagnose=True,
            )
        )
    return sink_ids
