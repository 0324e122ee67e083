"""
Script classification.

Decides, for one `<script>` element, whether it is captured into the module graph
as a local file or as inline code, left alone as a remote reference, or suppressed.
Classification never touches the tree; the caller applies `remove` decisions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from urllib.parse import unquote, urlsplit

from bs4.element import Tag

# `http:`, `data:`, `blob:` and friends.
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


class ScriptKind(str, Enum):
    LOCAL = "local"
    INLINE = "inline"
    REMOTE = "remote"
    SUPPRESSED = "suppressed"


@dataclass(frozen=True)
class ScriptDecision:
    """
    Outcome of classifying one script element. `module_id` is set only for
    captured scripts; `text` only for inline ones.
    """

    kind: ScriptKind
    module_id: str | None = None
    text: str | None = None
    remove: bool = False

    @property
    def captured(self) -> bool:
        return self.module_id is not None


def is_local(url: str) -> bool:
    """
    True for document-relative references into the project tree. Remote URLs,
    root-relative paths (`/js/app.js`) and bare fragments are not local.
    """
    return not (url.startswith(("/", "#")) or _SCHEME_RE.match(url))


def resolve_reference(document: Path, url: str) -> Path:
    """Resolve a local `src`/`href` against the directory of the referencing document."""
    path = unquote(urlsplit(url).path)
    return (document.parent / path).resolve()


def virtual_id(document: Path, index: int) -> str:
    """
    Identifier for inline code: the document path plus `index`, the element's
    position among all elements of the document in document order (not its
    position within its parent).
    """
    return f"{document}_{index}.js"


def text_content(element: Tag) -> str:
    return "".join(str(child) for child in element.contents)


def _attribute(element: Tag, name: str) -> str | None:
    value = element.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


def is_import_link(element: Tag) -> bool:
    """True for `<link rel="import" href="...">`."""
    if element.name != "link" or not _attribute(element, "href"):
        return False
    rel = element.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return "import" in [r.lower() for r in rel]


def import_target(element: Tag) -> str:
    return _attribute(element, "href") or ""


def classify_script(
    element: Tag,
    document: Path,
    index: int,
    *,
    suppressed: bool = False,
    rewrite: bool = False,
) -> ScriptDecision:
    """
    Classify a `<script>` element found at position `index` of `document`.

    Local `src` and inline scripts are captured (and marked for removal when
    `rewrite` is set); non-local `src` scripts are left untouched. In a suppressed
    document nothing is captured, but the tags are still marked for removal.
    """
    src = _attribute(element, "src")

    if src and not is_local(src):
        return ScriptDecision(ScriptKind.REMOTE)

    if suppressed:
        return ScriptDecision(ScriptKind.SUPPRESSED, remove=rewrite)

    if src:
        return ScriptDecision(
            ScriptKind.LOCAL,
            module_id=str(resolve_reference(document, src)),
            remove=rewrite,
        )

    return ScriptDecision(
        ScriptKind.INLINE,
        module_id=virtual_id(document, index),
        text=text_content(element),
        remove=rewrite,
    )
