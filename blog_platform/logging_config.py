import logging

from blog_platform.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configure the root logger once at startup.

    SQLAlchemy's engine logger is left alone: ``echo`` on the engine
    controls statement logging separately.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )
    return logging.getLogger("blog_platform")
