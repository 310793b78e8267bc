import logging
import sys
import io


class _DummyStream(io.TextIOBase):
    """
    A file-like object that discards all input.
    Prevents AttributeError when sys.stdout/stderr are None in windowed builds.
    """

    def write(self, x: str) -> int:
        return len(x)

    def flush(self) -> None:
        pass


def init_streams() -> None:
    """
    Ensures sys.stdout and sys.stderr are not None.
    """
    if sys.stdout is None:
        sys.stdout = _DummyStream()
    if sys.stderr is None:
        sys.stderr = _DummyStream()


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configures the root `pix3l` logger. Only entry points call this;
    library modules just ask for a child logger.
    """
    init_streams()

    logger = logging.getLogger("pix3l")
    logger.setLevel(level)

    # Prevent duplicate handlers if called multiple times
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Helper to get a sub-logger for a specific module.
    """
    if name:
        if name.startswith("pix3l."):
            name = name[len("pix3l.") :]
        return logging.getLogger(f"pix3l.{name}")
    return logging.getLogger("pix3l")


def parse_level(value: str | None, default: int = logging.INFO) -> int:
    """Maps a level name such as "debug" to its logging constant."""
    if not value:
        return default
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default
