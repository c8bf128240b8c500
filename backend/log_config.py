import logging
import os
import sys
from pathlib import Path

from loguru import logger

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Remove default handler
logger.remove()


# Configure Loguru with a format that separates module name from message
def add_module_name(record):
    """Ensure every record has module_name in extra."""
    if "module_name" not in record["extra"]:
        record["extra"]["module_name"] = f"{record['name']}:{record['line']}"
    return True


logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <5}</level> | <cyan>{extra[module_name]}</cyan> - {message}",
    level=LOG_LEVEL,
    colorize=True,
    filter=add_module_name,
)


# Intercept standard logging so core.solar_advice records end up in loguru
class InterceptHandler(logging.Handler):
    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        if record.name == "root":
            module_name = record.module
        elif "." in record.name:
            module_name = record.name
        else:
            module_name = Path(record.pathname).stem

        logger.bind(module_name=f"{module_name}:{record.lineno}").opt(
            exception=record.exc_info
        ).log(level, record.getMessage())


logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

# The simulator logs every hour at DEBUG; keep it quiet unless asked for
logging.getLogger("core.solar_advice").setLevel(LOG_LEVEL)

# Replace handlers installed by uvicorn and friends with the interceptor
for name in list(logging.root.manager.loggerDict.keys()):
    logging.getLogger(name).handlers = []
    logging.getLogger(name).propagate = True
