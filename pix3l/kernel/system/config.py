import logging
import os
from pix3l.core.types import AppConfig
from pix3l.core.constants import PROCESSING_CONSTANTS
from pix3l.core.validation import validate_int
from pix3l.kernel.system.logging import parse_level
from pix3l.kernel.system.paths import get_default_user_dir


def load_app_config() -> AppConfig:
    """
    Builds the application config from the environment.
    """
    user_dir = get_default_user_dir()
    return AppConfig(
        preview_max_dimension=max(
            1,
            validate_int(
                os.getenv("PIX3L_PREVIEW_SIZE"),
                PROCESSING_CONSTANTS["preview_max_dimension"],
            ),
        ),
        jpeg_quality=min(
            100,
            max(
                1,
                validate_int(
                    os.getenv("PIX3L_JPEG_QUALITY"),
                    PROCESSING_CONSTANTS["jpeg_default_quality"],
                ),
            ),
        ),
        log_level=parse_level(os.getenv("PIX3L_LOG_LEVEL"), logging.INFO),
        presets_dir=os.path.join(user_dir, "presets"),
    )


# Global application constants
APP_CONFIG = load_app_config()
