import logging

from flask import Response, abort, jsonify, request
from markupsafe import escape

from auth_utils import new_csrf_token, require_csrf, require_path_arg, resolve_file
from config import app
from file_utils import is_markdown
from frontmatter_utils import is_draft
from path_utils import PathError, ValidatedPath
from view_utils import csrf_field, delete_form, html_page, parent_link, status_page

files_log = logging.getLogger("mdwrangler.files")


def resolve_markdown(rel: str) -> ValidatedPath:
    vp = resolve_file(rel)
    if not is_markdown(vp):
        abort(400, "File is not a markdown file")
    return vp


def read_text_or_404(vp: ValidatedPath) -> str:
    try:
        return vp.read_text()
    except PathError:
        files_log.warning("Unreadable file: %s", vp.relative)
        abort(404, "Not found")


def modified_time(vp: ValidatedPath) -> str:
    try:
        return str(int(vp.stat().st_mtime))
    except PathError:
        abort(404, "Not found")


@app.route("/edit")
def edit_file():
    vp = resolve_markdown(require_path_arg())
    content = read_text_or_404(vp)
    token = new_csrf_token()

    draft = ' <span class="badge">draft</span>' if is_draft(content) else ""
    body = f"""
    <p><a class="btn" href="{parent_link(vp.relative)}">⬅ Back</a></p>
    <h2>✏ {escape(vp.name)}{draft}</h2>
    <p class="muted">Path: <span class="path">/{escape(vp.relative)}</span></p>
    <form method="POST" action="/save" id="editForm">
      <input type="hidden" name="path" value="{escape(vp.relative)}">
      {csrf_field(token)}
      <textarea name="content" spellcheck="false">\n{escape(content)}</textarea>
      <p><button class="btn" type="submit">💾 Save</button></p>
    </form>
    {delete_form(vp.relative, token)}
    """
    return Response(html_page(vp.name, body), mimetype="text/html")


@app.route("/save", methods=["POST"])
def save_file():
    require_csrf()

    vp = resolve_markdown(require_path_arg(request.form))
    # browsers submit textareas with CRLF; reads already see LF
    content = request.form.get("content", "").replace("\r\n", "\n")
    if read_text_or_404(vp) == content:
        files_log.info("File content unchanged, skipping write: %s", vp.relative)
        page = status_page(
            "File Unchanged", "ℹ No Changes to Save", vp.relative, "content is unchanged.", True
        )
        return Response(page, mimetype="text/html")

    with open(vp.path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    files_log.info("File saved successfully: %s", vp.relative)
    page = status_page(
        "File Saved", "✅ File Saved Successfully!", vp.relative, "has been saved.", True
    )
    return Response(page, mimetype="text/html")


@app.route("/delete", methods=["POST"])
def delete_file():
    require_csrf()

    vp = resolve_file(require_path_arg(request.form))
    try:
        vp.path.unlink()
    except FileNotFoundError:
        abort(404, "Not found")
    files_log.info("File deleted successfully: %s", vp.relative)
    page = status_page(
        "File Deleted", "🗑 File Deleted Successfully!", vp.relative, "has been deleted.", False
    )
    return Response(page, mimetype="text/html")


@app.route("/file-info")
def file_info():
    vp = resolve_file(require_path_arg())
    try:
        st = vp.stat()
    except PathError:
        abort(404, "Not found")
    return jsonify({"modified_time": str(int(st.st_mtime)), "size": st.st_size})


@app.route("/file-content")
def file_content():
    vp = resolve_file(require_path_arg())
    if not is_markdown(vp):
        abort(400, "Only markdown files are supported")
    return jsonify({"content": read_text_or_404(vp), "modified_time": modified_time(vp)})
