import logging
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Default contract document for the CLI when none is given
    CONTRACT_DOCUMENT = os.getenv('CONTRACT_DOCUMENT', 'openapi.yaml')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING').upper()

    # Enforcement mode (CONTRACT_MODE) and the optional checks
    # (CONTRACT_REPORT_PARAM_TYPES, CONTRACT_VALIDATE_BODIES,
    # CONTRACT_VALIDATE_RESPONSES) are read on use by contracts.registry and
    # contracts.feature_flags, so they can change without a restart.


def configure_logging(level: str = None) -> None:
    """Configure root logging for CLI entry points."""
    logging.basicConfig(
        level=getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.WARNING),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
