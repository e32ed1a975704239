import logging
from pathlib import Path

from flask import abort, current_app, request

from csrf_utils import CsrfError, CsrfTokenService
from path_utils import PathError, PathValidator, ValidatedPath

security_log = logging.getLogger("mdwrangler.security")


def csrf_service() -> CsrfTokenService:
    return current_app.config["CSRF_SERVICE"]


def path_validator() -> PathValidator:
    return current_app.config["PATH_VALIDATOR"]


def new_csrf_token() -> str:
    return csrf_service().generate()


def require_csrf() -> None:
    token = request.form.get("csrf_token", "")
    try:
        csrf_service().validate(token)
    except CsrfError as e:
        security_log.warning(
            "Rejected %s %s: %s (%s)", request.method, request.path, type(e).__name__, e
        )
        abort(403, "Invalid CSRF Token")


def not_found(rel: str, e: PathError):
    # same response for missing, outside-base and non-file paths
    security_log.info("Path rejected %r: %s", rel, type(e).__name__)
    abort(404, "Not found")


def resolve_file(rel: str) -> ValidatedPath:
    try:
        return path_validator().validate(rel)
    except PathError as e:
        not_found(rel, e)


def resolve_dir(rel: str) -> Path:
    try:
        return path_validator().validate_directory(rel)
    except PathError as e:
        not_found(rel, e)


def require_path_arg(source=None) -> str:
    source = request.args if source is None else source
    rel = source.get("path")
    if rel is None:
        abort(400, "Missing path parameter")
    return rel
