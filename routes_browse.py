import logging

from flask import Response, abort, redirect, request
from markupsafe import escape

from auth_utils import new_csrf_token, path_validator, require_csrf, resolve_dir
from config import APP_TITLE, app
from file_utils import FileCategory, classify, format_size, type_description
from path_utils import InvalidFilename, normalize_markdown_filename
from view_utils import (
    breadcrumbs,
    browse_link,
    csrf_field,
    file_link,
    html_page,
    parent_link,
)

files_log = logging.getLogger("mdwrangler.files")

# category -> (icon, route); None route means the entry is not clickable
ENTRY_VIEWS = {
    FileCategory.MARKDOWN: ("📄", "/edit"),
    FileCategory.IMAGE: ("🖼", "/preview"),
    FileCategory.IFRAME_SAFE: ("📄", "/file-preview"),
    FileCategory.UNKNOWN: ("📄", "/file-preview"),
    FileCategory.EXECUTABLE: ("⚠", None),
}


def list_directory(folder, rel: str):
    """Visible entries of *folder*, directories first, then by name."""
    entries = []
    for p in folder.iterdir():
        if p.name.startswith("."):
            continue
        try:
            p.name.encode("utf-8")
        except UnicodeEncodeError:
            files_log.debug("Skipping entry with undecodable name in %s", rel or ".")
            continue
        try:
            is_dir = p.is_dir()
            size = None if is_dir else p.stat().st_size
        except OSError:
            continue
        entries.append(
            {
                "name": p.name,
                "rel": f"{rel}/{p.name}" if rel else p.name,
                "is_dir": is_dir,
                "size": size,
            }
        )
    entries.sort(key=lambda e: (not e["is_dir"], e["name"].lower()))
    return entries


def entry_row(e) -> str:
    name = escape(e["name"])
    if e["is_dir"]:
        return (
            "<tr class='directory'>"
            f"<td><a href='{browse_link(e['rel'])}'>📁 {name}</a></td>"
            "<td class='muted'>Folder</td><td></td></tr>"
        )

    category = classify(e["name"])
    icon, route = ENTRY_VIEWS[category]
    size = format_size(e["size"])
    if route is None:
        return (
            "<tr class='file executable'>"
            f"<td title='Executable files cannot be opened'>{icon} {name}</td>"
            f"<td class='muted'>{type_description(e['name'])}</td><td class='muted'>{size}</td></tr>"
        )
    return (
        "<tr class='file'>"
        f"<td><a href='{file_link(route, e['rel'])}'>{icon} {name}</a></td>"
        f"<td class='muted'>{type_description(e['name'])}</td><td class='muted'>{size}</td></tr>"
    )


@app.route("/")
def index():
    folder = resolve_dir(request.args.get("path", ""))
    rel = path_validator().relative_to_base(folder)
    entries = list_directory(folder, rel)

    crumbs = " / ".join(
        f"<a href='{url}'>{escape(name)}</a>" for name, url in breadcrumbs(rel)
    )
    up = f'<a class="btn" href="{parent_link(rel)}">⬅ Up</a>' if rel else ""
    new_file = file_link("/new-file", rel) if rel else "/new-file"

    rows = "\n".join(entry_row(e) for e in entries)
    body = f"""
    <h2>{APP_TITLE}</h2>
    <p class="crumbs"><a href="/">🏠 root</a>{' / ' + crumbs if crumbs else ''}</p>
    <div class="toolbar">
      {up}
      <div class="spacer"></div>
      <a class="btn" href="{new_file}">➕ New file</a>
    </div>
    <table>
      <thead><tr><th>Name</th><th>Type</th><th>Size</th></tr></thead>
      <tbody>{rows}</tbody>
    </table>
    """
    return Response(html_page("Browse", body), mimetype="text/html")


@app.route("/new-file", methods=["GET"])
def new_file_form():
    folder = resolve_dir(request.args.get("path", ""))
    rel = path_validator().relative_to_base(folder)

    body = f"""
    <p><a class="btn" href="{browse_link(rel)}">⬅ Back</a></p>
    <h2>New markdown file</h2>
    <p class="muted">In: <span class="path">/{escape(rel)}</span></p>
    <form method="POST" action="/new-file">
      <input type="hidden" name="path" value="{escape(rel)}">
      {csrf_field(new_csrf_token())}
      <input class="btn" type="text" name="filename" placeholder="my-post.md" required autofocus>
      <button class="btn" type="submit">Create</button>
    </form>
    <p class="muted">ASCII letters, numbers, '-', '_' and '.' only. ".md" is added automatically.</p>
    """
    return Response(html_page("New file", body), mimetype="text/html")


@app.route("/new-file", methods=["POST"])
def create_new_file():
    require_csrf()

    folder = resolve_dir(request.form.get("path", ""))
    try:
        filename = normalize_markdown_filename(request.form.get("filename", ""))
    except InvalidFilename as e:
        abort(400, str(e))

    target = folder / filename
    try:
        # "x" mode refuses to overwrite
        with open(target, "x", encoding="utf-8"):
            pass
    except FileExistsError:
        abort(409, "File already exists")

    rel = path_validator().relative_to_base(target)
    files_log.info("File created: %s", rel)
    return redirect(file_link("/edit", rel))
