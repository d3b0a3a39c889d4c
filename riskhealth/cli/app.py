import sys
from pathlib import Path
from loguru import logger
from riskhealth.config.settings import settings


def configure_logging(log_dir="logs"):
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL,
               format="<green>{time:HH:mm:ss}</green> | <level>{level:<8}</level> | {message}",
               colorize=True)
    logger.add(f"{log_dir}/riskhealth.log", level="DEBUG", rotation="10 MB",
               format="{time} | {level} | {message}")


def main():
    configure_logging()
    from riskhealth.cli.commands import cli
    cli()
