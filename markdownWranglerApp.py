import logging
from pathlib import Path

import click

from config import HOST, PORT, app, configure, setup_logging

# route modules register themselves on the shared app
import routes_browse  # noqa: F401
import routes_edit  # noqa: F401
import routes_preview  # noqa: F401

logger = logging.getLogger("mdwrangler.app")


@app.errorhandler(404)
def not_found(_e):
    return "Not found", 404


@click.command(help="A web interface to manage websites stored as markdown files")
@click.argument(
    "target_dir",
    default=".",
    metavar="DIR",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--host", default=HOST, show_default=True, help="Address to bind")
@click.option("--port", default=PORT, show_default=True, type=int, help="Port to listen on")
def main(target_dir: Path, debug: bool, host: str, port: int) -> None:
    setup_logging(debug)
    configure(target_dir)

    logger.info("Web server listening on http://%s:%s, press Ctrl+C to stop", host, port)
    app.run(host=host, port=port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
