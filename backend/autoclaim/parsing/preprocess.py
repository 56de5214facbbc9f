"""
Email body clean-up ahead of field extraction.

  - HTML bodies are flattened to text (scripts/styles dropped, block tags
    become line breaks, entities decoded)
  - forwarded-mail artifacts are removed ("> " quoting, separator lines,
    From/Sent/To/Subject headers)

A "Date:" line is only removed when it has the shape of a mail header
("Date: Mon, Jan 5, 2026 at 10:00 AM"). Booking bodies also carry a
"Date: 05 January 2026" line, which is the journey date and must survive.
"""

import html
import re

_TAG_RE = re.compile(r"<[^>]+>")
_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_BREAK_RE = re.compile(r"<br\s*/?>|</p\s*>|</div\s*>|</tr\s*>", re.IGNORECASE)

_QUOTE_PREFIX_RE = re.compile(r"^>+[ \t]?", re.MULTILINE)
_SEPARATOR_RE = re.compile(r"^(?:-{3,}|_{3,}).*$", re.MULTILINE)
_WROTE_RE = re.compile(r"^On .+ wrote:$", re.MULTILINE)
_HEADER_RE = re.compile(r"^(?:From|Sent|To|Subject):[ \t]*.+$", re.MULTILINE)
_HEADER_DATE_RE = re.compile(
    r"^Date:[ \t]*[A-Z][a-z]{2},[ \t]+[A-Z][a-z]{2}[ \t]+\d{1,2},[ \t]+\d{4}[ \t]+at[ \t]+\d{1,2}:\d{2}[ \t]*(?:AM|PM)?.*$",
    re.MULTILINE | re.IGNORECASE,
)


def is_html(body: str) -> bool:
    return _TAG_RE.search(body) is not None


def strip_html(body: str) -> str:
    text = _SCRIPT_RE.sub("", body)
    text = _STYLE_RE.sub("", text)
    text = _BREAK_RE.sub("\n", text)
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text).replace("\xa0", " ")

    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n[ \t]+", "\n", text)
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def clean_forwarded_email(text: str) -> str:
    text = _QUOTE_PREFIX_RE.sub("", text)
    text = _SEPARATOR_RE.sub("", text)
    text = _WROTE_RE.sub("", text)
    text = _HEADER_RE.sub("", text)
    text = _HEADER_DATE_RE.sub("", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def preprocess_email(body: str) -> str:
    text = strip_html(body) if is_html(body) else body
    return clean_forwarded_email(text.replace("\r\n", "\n"))
