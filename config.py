import logging
import os
from pathlib import Path

from flask import Flask
from dotenv import load_dotenv

from csrf_utils import CsrfTokenService, create_secret
from path_utils import PathValidator

load_dotenv()

# ----------------------------
# CONFIG (from environment, with defaults)
# ----------------------------
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "5420"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CSRF tokens are valid for an hour; small tolerance for clocks running ahead
CSRF_MAX_AGE = int(os.getenv("CSRF_MAX_AGE", "3600"))
CSRF_CLOCK_SKEW = int(os.getenv("CSRF_CLOCK_SKEW", "60"))

APP_TITLE = "Markdown Wrangler"

# ----------------------------
# FLASK APP
# ----------------------------
app = Flask(__name__)

logger = logging.getLogger("mdwrangler.app")


def setup_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else getattr(logging, LOG_LEVEL, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def configure(base_dir, secret: bytes = None) -> None:
    """Bind the app to its base directory and create the process secret.

    Called once by the entry point before the server accepts requests. The
    validator and token service stored here are read-only afterwards.
    """
    validator = PathValidator(Path(base_dir))
    csrf = CsrfTokenService(
        secret if secret is not None else create_secret(),
        max_age=CSRF_MAX_AGE,
        clock_skew=CSRF_CLOCK_SKEW,
    )

    app.config["BASE_DIR"] = validator.base_dir
    app.config["PATH_VALIDATOR"] = validator
    app.config["CSRF_SERVICE"] = csrf
    logger.info("Serving directory: %s", validator.base_dir)
