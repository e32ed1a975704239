from pathlib import PurePosixPath
from typing import List, Tuple
from urllib.parse import quote

from markupsafe import escape

from config import APP_TITLE


def html_page(title: str, body: str) -> str:
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>{escape(title)} - {APP_TITLE}</title>
  <style>
    body {{ font-family: system-ui, Arial, sans-serif; margin: 16px; }}
    a {{ text-decoration: none; color: inherit; }}
    .path {{ font-family: ui-monospace, SFMono-Regular, Menlo, monospace; }}
    .muted {{ color: #666; }}
    .btn {{ display:inline-block; padding:8px 12px; border:1px solid #ddd; border-radius:10px; margin-right:8px; background:#fff; cursor:pointer; font: inherit; }}
    .btn.danger {{ border-color: #e5b4b4; color: #a61b1b; }}
    .toolbar {{ display:flex; flex-wrap: wrap; gap:8px; align-items:center; margin: 12px 0 10px; }}
    .toolbar .spacer {{ flex: 1; }}
    .crumbs a {{ text-decoration: underline; }}
    table {{ border-collapse: collapse; width: 100%; }}
    th, td {{ padding: 10px; border-bottom: 1px solid #eee; text-align: left; }}
    tr.executable td {{ color: #a61b1b; }}
    .badge {{ display:inline-block; padding:2px 8px; border-radius:8px; background:#fff3cd; color:#7a5b00; font-size:12px; }}
    .success {{ color: #1b7a2b; }}
    textarea {{ width: 100%; min-height: 60vh; font-family: ui-monospace, SFMono-Regular, Menlo, monospace; font-size: 14px; }}

    /* Preview */
    .preview {{ margin-top: 16px; }}
    .preview img {{ max-width: 100%; height: auto; border: 1px solid #eee; border-radius: 8px; }}
    .preview iframe {{ width: 100%; height: 70vh; border: 1px solid #eee; border-radius: 8px; }}
  </style>
</head>
<body>
  {body}
</body>
</html>"""


def browse_link(rel: str) -> str:
    return f"/?path={quote(rel, safe='')}" if rel else "/"


def file_link(route: str, rel: str) -> str:
    return f"{route}?path={quote(rel, safe='')}"


def parent_of(rel: str) -> str:
    parent = str(PurePosixPath(rel.strip("/")).parent)
    return "" if parent == "." else parent


def parent_link(rel: str) -> str:
    return browse_link(parent_of(rel))


def breadcrumbs(rel: str) -> List[Tuple[str, str]]:
    crumbs = []
    so_far = []
    for part in [p for p in rel.strip("/").split("/") if p]:
        so_far.append(part)
        crumbs.append((part, browse_link("/".join(so_far))))
    return crumbs


def csrf_field(token: str) -> str:
    return f'<input type="hidden" name="csrf_token" value="{escape(token)}">'


def delete_form(rel: str, token: str) -> str:
    name = PurePosixPath(rel).name
    return f"""
    <form method="POST" action="/delete" style="display:inline"
          onsubmit="return confirm('Are you sure you want to delete this file?\\n\\nThis action cannot be undone.');">
      <input type="hidden" name="path" value="{escape(rel)}">
      {csrf_field(token)}
      <button class="btn danger" type="submit">🗑 Delete {escape(name)}</button>
    </form>
    """


def status_page(title: str, heading: str, rel: str, detail: str, show_edit: bool) -> str:
    edit = (
        f'<a class="btn" href="{file_link("/edit", rel)}">✏ Edit again</a>' if show_edit else ""
    )
    body = f"""
    <h2 class="success">{escape(heading)}</h2>
    <p><span class="path">{escape(rel)}</span> {escape(detail)}</p>
    <p>
      {edit}
      <a class="btn" href="{parent_link(rel)}">⬅ Back to directory</a>
    </p>
    """
    return html_page(title, body)
