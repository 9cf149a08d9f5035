"""Atlassian Document Format (ADF) conversion for long-text fields.

Jira Cloud stores descriptions and comment bodies as a node tree::

    {"version": 1, "type": "doc", "content": [
        {"type": "paragraph", "content": [{"type": "text", "text": "..."}]},
        ...
    ]}

The editing surface is plain text, so the tree is flattened on the way in and
rebuilt (one paragraph per line) on the way out. The pair is not a
perfect round trip: ``hardBreak`` nodes decode to separate lines and come back
as separate paragraphs.
"""

from typing import Any, Dict, List

ADF_VERSION = 1


def text_to_adf(plain_text: str) -> Dict[str, Any]:
    """Build an ADF document with one paragraph per input line.

    Empty lines become empty paragraphs, they are never dropped.
    """
    content = [
        {
            "type": "paragraph",
            "content": [{"type": "text", "text": line}]
        }
        for line in (plain_text or "").split("\n")
    ]
    return {"version": ADF_VERSION, "type": "doc", "content": content}


def adf_to_text(node: Any) -> str:
    """Flatten an ADF node (or bare list of nodes) into plain text."""
    lines: List[str] = []
    _walk(node, lines)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines).strip()


def _walk_blocks(nodes: List[Any], lines: List[str]) -> None:
    # Sibling blocks are separated by a fresh line.
    for index, child in enumerate(nodes):
        if index:
            lines.append("")
        _walk(child, lines)


def _walk(node: Any, lines: List[str]) -> None:
    match node:
        case None:
            return
        case list():
            _walk_blocks(node, lines)
        case {"type": "doc", **rest}:
            _walk_blocks(_children(rest), lines)
        case {"type": "paragraph", **rest}:
            if not lines:
                lines.append("")
            for child in _children(rest):
                _walk(child, lines)
        case {"type": "hardBreak"}:
            lines.append("")
        case {"type": "text", **rest}:
            if not lines:
                lines.append("")
            text = rest.get("text")
            lines[-1] += text if isinstance(text, str) else ""
        case {"content": list(children)}:
            # Unknown node kinds (lists, panels, headings...) keep their text.
            for child in children:
                _walk(child, lines)
        case _:
            return


def _children(node: Dict[str, Any]) -> List[Any]:
    content = node.get("content")
    return content if isinstance(content, list) else []
