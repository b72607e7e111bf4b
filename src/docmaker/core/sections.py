"""Turn a ``FormSnapshot`` into the ordered text sections of a trust packet.

The same title and section list feed both generation paths: the on-device
composer lays them out directly, the remote renderer receives them wrapped
in a small HTML page.
"""

from __future__ import annotations

import html
from datetime import datetime

from .models import FormSnapshot

NOT_PROVIDED = "Not provided"
TITLE_PREFIX = "Living Trust Packet"

# Inline stylesheet for the remote HTML render
_HTML_STYLE = (
    "body{font-family:Helvetica,Arial,sans-serif;font-size:14px;color:#1b2a2f;padding:48px;}"
    "h1{font-size:24px;}"
    "p{line-height:1.5;margin-bottom:12px;color:#49666a;}"
)


def display(value: str) -> str:
    """Trim *value*, substituting ``Not provided`` when nothing is left."""
    trimmed = value.strip()
    return trimmed or NOT_PROVIDED


def format_timestamp(moment: datetime) -> str:
    """Medium date with short time, e.g. ``Oct 19, 2026 at 3:04 PM``."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment:%b} {moment.day}, {moment.year} at {hour}:{moment:%M} {meridiem}"


def make_title(moment: datetime) -> str:
    return f"{TITLE_PREFIX} – {format_timestamp(moment)}"


def build_sections(snapshot: FormSnapshot, moment: datetime) -> list[str]:
    """Build the section list in document order.

    Order: primary person (4 lines), spouse (3 lines), children, trustees,
    then a trailing generation timestamp.
    """
    sections: list[str] = []

    primary = snapshot.primary_person
    sections.append(f"Customer Name: {display(primary.full_name)}")
    sections.append(f"Address: {display(primary.address)}")
    sections.append(f"Email: {display(primary.email)}")
    sections.append(f"Phone: {display(primary.phone)}")

    spouse = snapshot.spouse
    sections.append(f"Spouse Name: {display(spouse.full_name)}")
    sections.append(f"Spouse Email: {display(spouse.email)}")
    sections.append(f"Spouse Phone: {display(spouse.phone)}")

    children = [c for c in snapshot.children if c.name.strip()]
    if not children:
        sections.append("Children: No children entered")
    for child in children:
        sections.append(
            f"Child – {child.name.strip()} (DOB: {display(child.date_of_birth)})"
        )

    trustees = sorted(snapshot.trustees, key=lambda t: t.order)
    if not trustees:
        sections.append("Trustees: Pending")
    for trustee in trustees:
        sections.append(
            f"Trustee #{trustee.order}: {display(trustee.full_name)}"
            f" – Email: {display(trustee.email)}"
            f" – Phone: {display(trustee.phone)}"
        )

    sections.append(f"Generated: {format_timestamp(moment)}")
    return sections


def make_html(title: str, sections: list[str]) -> str:
    """Wrap the title in ``<h1>`` and every section in ``<p>``."""
    body = "".join(f"<p>{html.escape(s)}</p>" for s in sections)
    return (
        '<html><head><meta charset="utf-8">'
        f"<style>{_HTML_STYLE}</style>"
        f"</head><body><h1>{html.escape(title)}</h1>{body}</body></html>"
    )
