from flask import Response, abort
from markupsafe import escape

from auth_utils import new_csrf_token, require_path_arg, resolve_file
from config import app
from file_utils import (
    FileCategory,
    classify,
    format_size,
    iframe_mime_type,
    image_dimensions,
    image_mime_type,
    type_description,
)
from path_utils import PathError, ValidatedPath
from view_utils import delete_form, file_link, html_page, parent_link

# sandboxed responses: no scripts, no same-origin access, no sniffing
SANDBOX_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Content-Security-Policy": "sandbox",
}


def file_size_or_unknown(vp: ValidatedPath) -> str:
    try:
        return format_size(vp.stat().st_size)
    except PathError:
        return "Unknown"


def read_bytes_or_404(vp: ValidatedPath) -> bytes:
    try:
        return vp.read_bytes()
    except PathError:
        abort(404, "Not found")


def inline_disposition(vp: ValidatedPath) -> str:
    # ASCII-only fallback name; the browser only uses it for "save as"
    name = vp.name.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f'inline; filename="{name}"'


@app.route("/preview")
def preview_image():
    vp = resolve_file(require_path_arg())
    if classify(vp) is not FileCategory.IMAGE:
        abort(400, "File is not an image file")

    dims = image_dimensions(vp.path)
    dims_html = f" • {dims[0]}×{dims[1]} px" if dims else ""
    body = f"""
    <p><a class="btn" href="{parent_link(vp.relative)}">⬅ Back</a></p>
    <h2>🖼 {escape(vp.name)}</h2>
    <p class="muted">Path: <span class="path">/{escape(vp.relative)}</span></p>
    <p class="muted">Size: {file_size_or_unknown(vp)}{dims_html}</p>
    <p>{delete_form(vp.relative, new_csrf_token())}</p>
    <div class="preview">
      <img src="{file_link('/image', vp.relative)}" alt="{escape(vp.name)}" />
    </div>
    """
    return Response(html_page(vp.name, body), mimetype="text/html")


@app.route("/image")
def serve_image():
    vp = resolve_file(require_path_arg())
    if classify(vp) is not FileCategory.IMAGE:
        abort(400, "File is not an image file")

    resp = Response(read_bytes_or_404(vp), mimetype=image_mime_type(vp))
    resp.headers["X-Content-Type-Options"] = "nosniff"
    if resp.mimetype == "image/svg+xml":
        # SVG can carry script
        resp.headers.update(SANDBOX_HEADERS)
    return resp


@app.route("/file-preview")
def preview_file():
    vp = resolve_file(require_path_arg())
    category = classify(vp)
    if category in (FileCategory.MARKDOWN, FileCategory.IMAGE):
        abort(400, "Use specific handlers for markdown and image files")

    if category is FileCategory.IFRAME_SAFE:
        viewer = f"""
        <div class="preview">
          <iframe sandbox src="{file_link('/file', vp.relative)}" title="{escape(vp.name)}"></iframe>
        </div>
        """
    else:
        viewer = """
        <div class="preview">
          <p class="muted">No preview available for this file type.</p>
        </div>
        """

    body = f"""
    <p><a class="btn" href="{parent_link(vp.relative)}">⬅ Back</a></p>
    <h2>📄 {escape(vp.name)}</h2>
    <p class="muted">Path: <span class="path">/{escape(vp.relative)}</span></p>
    <p class="muted">Type: {type_description(vp)} • Size: {file_size_or_unknown(vp)}</p>
    <p>{delete_form(vp.relative, new_csrf_token())}</p>
    {viewer}
    """
    return Response(html_page(vp.name, body), mimetype="text/html")


@app.route("/file")
def serve_file():
    """
    Raw bytes for the sandboxed preview iframe.
    Only iframe-safe types; executables and unknown types are never streamed.
    """
    vp = resolve_file(require_path_arg())
    if classify(vp) is not FileCategory.IFRAME_SAFE:
        abort(403, "File type not allowed for security reasons")

    resp = Response(read_bytes_or_404(vp))
    resp.headers["Content-Type"] = iframe_mime_type(vp)
    resp.headers["Content-Disposition"] = inline_disposition(vp)
    resp.headers.update(SANDBOX_HEADERS)
    return resp
