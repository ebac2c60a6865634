"""Human-facing views of the repository: mirror file list and HTML index."""

import re
from datetime import datetime
from html import escape
from itertools import groupby

from release_db.config import RepoSettings

DISTRO_RE = re.compile(r"\.(deb|rpm|pkg\.tar\.zst)")


def human_size(size: int) -> str:
    return f"{size / 1024 / 1024:.1f} MB"


def mirror_files(releases: list[dict]) -> list[dict]:
    """Flatten releases into one entry per downloadable asset."""
    files = []
    for release in releases:
        for asset in release.get("assets") or []:
            entry = {
                "version": release.get("tag_name", ""),
                "name": asset.get("name", ""),
                "size": human_size(asset.get("size", 0)),
                "url": asset.get("browser_download_url", ""),
            }
            match = DISTRO_RE.search(entry["name"])
            if match:
                entry["distro"] = match.group(1)
            files.append(entry)
    return files


def _row(href: str, label: str, size: str, date: str) -> str:
    return (
        f'<tr><td><a href="{escape(href)}">{escape(label)}</a></td>'
        f"<td>{escape(size)}</td><td>{escape(date)}</td></tr>"
    )


def render_index(
    settings: RepoSettings,
    files: list[dict],
    now: datetime,
    base_url: str = "/db/archlinux/",
) -> str:
    """Render the directory listing page for the repository."""
    stamp = now.strftime("%a, %d %b %Y %H:%M:%S GMT")
    packages = [f for f in files if f.get("distro") == "pkg.tar.zst"]

    sections = [
        '<div class="section">Repository Metadata</div>',
        "<table><tr><th>Filename</th><th>Size</th><th>Date</th></tr>",
    ]
    for name in settings.metadata_files:
        sections.append(_row(base_url + name, name, "-", now.strftime("%d %b %Y")))
    sections.append("</table>")

    by_version = sorted(packages, key=lambda f: f["version"], reverse=True)
    for version, group in groupby(by_version, key=lambda f: f["version"]):
        sections.append(f'<div class="section">Version {escape(version)}</div>')
        sections.append("<table><tr><th>Package</th><th>Size</th><th>Date</th></tr>")
        for pkg in group:
            sections.append(_row(pkg["url"], pkg["name"], pkg["size"], version))
        sections.append("</table>")

    if not packages:
        sections.append('<div class="section">No Packages Found</div>')
        sections.append("<p>The repository currently contains no Arch Linux packages.</p>")

    body = "\n".join(sections)
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>Arch Linux Repository - {escape(base_url)}</title>
  <style>
    body {{ font-family: monospace; max-width: 1200px; margin: 0 auto; padding: 20px; }}
    table {{ width: 100%; border-collapse: collapse; margin: 10px 0; }}
    th, td {{ padding: 8px; text-align: left; border-bottom: 1px solid #ddd; }}
    .section {{ margin: 20px 0 10px; font-weight: bold; }}
  </style>
</head>
<body>
  <div class="nav-up"><a href="../">Parent Directory</a></div>
  <h1>Index of {escape(base_url)}</h1>
  <p>Last updated: {stamp}</p>
{body}
  <p>Generated at: {stamp}</p>
</body>
</html>
"""
