"""SVG rendering for the embeddable Humanity Passport badge.

The badge is a card-sized SVG whose width grows with the owner/repo text.
Text widths are estimated from the character count, so the numbers below are
tuned for common sans-serif stacks rather than exact glyph metrics.
"""

import math
from dataclasses import dataclass
from typing import Literal
from urllib.parse import quote
from xml.sax.saxutils import escape

BadgeState = Literal["approved", "rejected", "pending"]

BRAND = "Humanity+ Passport"
CREST_GLYPH = "H+"
FONT_STACK = "Inter,Segoe UI,DejaVu Sans,Verdana,Geneva,sans-serif"

HEIGHT = 180
CAP = 120  # crest cap width
MIN_WIDTH = 100
LPAD = 40
RPAD = 40
GAP = 20  # crest to text block
GAP_TO_CHIP = 24

BRAND_SIZE = 26
OWNER_SIZE = 18
CHIP_SIZE = 18

CHIP_H = 48
CHIP_RADIUS = 24
CHIP_ICON_W = 20
CHIP_PADW = 16
CHIP_ICON_GAP = 26

CHAR_WIDTH_FACTOR = 0.62
ACCENT = "#22d3ee"

CHIP_LABELS: dict[str, str] = {
    "approved": "APPROVED",
    "rejected": "NOT APPROVED",
    "pending": "ANALYSIS PENDING",
}

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


@dataclass(frozen=True)
class BadgeTheme:
    bg_start: str
    bg_end: str
    chip_fill: str
    border: str


THEMES: dict[str, BadgeTheme] = {
    "approved": BadgeTheme("#065f46", "#22c55e", "#16a34a", "#86efac"),
    "rejected": BadgeTheme("#3f3f46", "#6b7280", "#ef4444", "#fecaca"),
    "pending": BadgeTheme("#334155", "#64748b", "#0ea5e9", "#bae6fd"),
}

ICONS: dict[str, str] = {
    "approved": (
        '<path d="M3 9l3 3 7-7" fill="none" stroke="#ffffff" stroke-width="2.2" '
        'stroke-linecap="round" stroke-linejoin="round"/>'
    ),
    "rejected": (
        '<g><rect x="7" y="4" width="2" height="7" rx="1" fill="#ffffff"/>'
        '<rect x="7" y="12" width="2" height="2" rx="1" fill="#ffffff"/></g>'
    ),
    "pending": (
        '<g><circle cx="8" cy="8" r="6" fill="none" stroke="#ffffff" '
        'stroke-opacity="0.6" stroke-width="2"/>'
        '<path d="M8 2a6 6 0 0 1 4.5 2" fill="none" stroke="#ffffff" '
        'stroke-width="2" stroke-linecap="round"/></g>'
    ),
}


def escape_xml(value: str) -> str:
    return escape(value, _XML_ENTITIES)


def encode_path_segment(value: str) -> str:
    """Percent-encode a URL path segment, apostrophes included."""
    return quote(value, safe="")


def text_width(text: str, size: int) -> int:
    return math.ceil(len(text) * size * CHAR_WIDTH_FACTOR)


def badge_uid(value: str) -> str:
    """Short deterministic id suffix so inlined badges don't share <defs> ids."""
    data = value.encode("utf-16-le")
    h = 5381
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h * 33) ^ unit) & 0xFFFFFFFF
    return _base36(h)


def _base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number == 0:
        return "0"
    out = []
    while number:
        number, rem = divmod(number, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def chip_width(label: str) -> int:
    return CHIP_PADW + CHIP_ICON_W + CHIP_ICON_GAP + text_width(label, CHIP_SIZE) + CHIP_PADW


def badge_width(owner_repo: str, label: str) -> int:
    text_block = max(text_width(BRAND, BRAND_SIZE), text_width(owner_repo, OWNER_SIZE))
    computed = LPAD + CAP + GAP + text_block + GAP_TO_CHIP + chip_width(label) + RPAD
    return max(MIN_WIDTH, computed)


def render_badge(owner: str, repo: str, state: BadgeState) -> str:
    """Render the badge SVG for a repository in the given verdict state.

    Inputs are not validated here; unknown states render as pending.
    """
    if state not in THEMES:
        state = "pending"
    owner_lc = owner.lower()
    repo_lc = repo.lower()
    owner_repo = f"{owner_lc}/{repo_lc}"
    href = f"/passport/{encode_path_segment(owner_lc)}/{encode_path_segment(repo_lc)}"

    label = CHIP_LABELS[state]
    theme = THEMES[state]
    width = badge_width(owner_repo, label)
    chip_w = chip_width(label)
    uid = badge_uid(f"{owner_repo}/{state}")
    title = escape_xml(f"{BRAND} - {owner_repo} - {label}")

    head = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
        f'width="{width}" height="{HEIGHT}" role="img" aria-label="{title}">'
        f"<title>{title}</title>"
        "<defs>"
        f'<linearGradient id="gBg-{uid}" x1="0" y1="0" x2="1" y2="1">'
        f'<stop offset="0" stop-color="{theme.bg_start}"/>'
        f'<stop offset="1" stop-color="{theme.bg_end}"/></linearGradient>'
        f'<linearGradient id="gSh-{uid}" x1="0" y1="0" x2="0" y2="1">'
        '<stop offset="0" stop-color="#ffffff" stop-opacity="0.18"/>'
        '<stop offset="1" stop-color="#ffffff" stop-opacity="0"/></linearGradient>'
        "</defs>"
        f'<a xlink:href="{escape_xml(href)}" target="_self">'
        '<g shape-rendering="geometricPrecision">'
    )
    tail = "</g></a></svg>"

    return (
        head
        + _panel(width, uid, theme)
        + _crest()
        + _text_block(owner_repo)
        + _chip(width, chip_w, label, state, theme)
        + tail
    )


def _panel(width: int, uid: str, theme: BadgeTheme) -> str:
    bottom = HEIGHT - 12
    right = width - 12
    return (
        f'<rect rx="12" width="{width}" height="{HEIGHT}" fill="url(#gBg-{uid})"/>'
        f'<rect rx="12" width="{width}" height="{HEIGHT}" fill="url(#gSh-{uid})"/>'
        f'<rect rx="12" width="{width}" height="{HEIGHT}" fill="none" '
        f'stroke="{theme.border}" stroke-opacity="0.25"/>'
        # corner brackets
        f'<path d="M12 12h16 M12 12v16" stroke="{ACCENT}" stroke-opacity="0.6" '
        'stroke-width="2" stroke-linecap="round"/>'
        f'<path d="M{right} 12h-16 M{right} 12v16" stroke="{ACCENT}" '
        'stroke-opacity="0.6" stroke-width="2" stroke-linecap="round"/>'
        f'<path d="M12 {bottom}h16 M12 {bottom}v-16" stroke="{ACCENT}" '
        'stroke-opacity="0.35" stroke-width="2" stroke-linecap="round"/>'
        f'<path d="M{right} {bottom}h-16 M{right} {bottom}v-16" stroke="{ACCENT}" '
        'stroke-opacity="0.35" stroke-width="2" stroke-linecap="round"/>'
    )


def _crest() -> str:
    cx = LPAD + CAP // 2
    cy = HEIGHT // 2
    return (
        f'<rect x="{LPAD}" y="18" width="{CAP}" height="{HEIGHT - 36}" rx="20" '
        'fill="#000000" opacity="0.25"/>'
        f'<circle cx="{cx}" cy="{cy}" r="40" fill="#0f172a" opacity="0.55"/>'
        f'<circle cx="{cx}" cy="{cy}" r="40" fill="none" stroke="{ACCENT}" stroke-opacity="0.5"/>'
        f'<text x="{cx}" y="{cy + 11}" text-anchor="middle" font-family="{FONT_STACK}" '
        f'font-size="32" fill="#ffffff" font-weight="700">{CREST_GLYPH}</text>'
    )


def _text_block(owner_repo: str) -> str:
    x = LPAD + CAP + GAP
    return (
        f'<text x="{x}" y="55" font-family="{FONT_STACK}" font-weight="700" '
        f'font-size="{BRAND_SIZE}" fill="#ffffff">{escape_xml(BRAND)}</text>'
        f'<text x="{x}" y="85" font-family="{FONT_STACK}" font-size="{OWNER_SIZE}" '
        f'fill="#d1fae5">{escape_xml(owner_repo)}</text>'
    )


def _chip(width: int, chip_w: int, label: str, state: str, theme: BadgeTheme) -> str:
    chip_x = width - RPAD - chip_w
    chip_y = (HEIGHT - CHIP_H) // 2
    label_y = round(CHIP_H / 2 + CHIP_SIZE / 2 - 2)
    return (
        f'<g transform="translate({chip_x},{chip_y})">'
        f'<rect width="{chip_w}" height="{CHIP_H}" rx="{CHIP_RADIUS}" '
        f'fill="{theme.chip_fill}" opacity="0.95"/>'
        f'<g transform="translate({CHIP_PADW},{(CHIP_H - 18) // 2})">{ICONS[state]}</g>'
        f'<text x="{CHIP_PADW + CHIP_ICON_W + 6}" y="{label_y}" font-family="{FONT_STACK}" '
        f'font-size="{CHIP_SIZE}" fill="#ffffff" font-weight="700">{escape_xml(label)}</text>'
        "</g>"
    )
