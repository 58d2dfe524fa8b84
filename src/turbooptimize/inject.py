"""Position-tracked markup injection.

Insertion points are found in one pass over the tokens of the original
document. Each insertion shifts everything after it, so offsets are
corrected with the running length of what has been inserted so far instead
of re-tokenizing the mutated text.
"""

from __future__ import annotations

from .tokenizer import tokenize
from .tokens import TokenKind


def _indent_fragment(fragment: str, indent: str, hanging: bool, newline: str = "\n") -> str:
    # One level deeper than the closing tag we insert in front of.
    pad = indent + ("  " if indent[:1] == " " else "\t")
    lines = [f"{pad}{line}{newline}" for line in fragment.splitlines()]
    if hanging:
        # The closing tag's own indent already precedes the insertion point.
        lines[0] = lines[0][len(indent) :]
        lines.append(indent)
    return "".join(lines)


def insert(code: str, text: str, offset: int) -> str:
    return code[:offset] + text + code[offset:]


def inject_html(doc: str, head_end: str | None = None, body_end: str | None = None) -> str:
    """Insert ``head_end`` before ``</head>`` and ``body_end`` before ``</body>``.

    Returns ``doc`` unchanged when it has neither closing tag.
    """
    targets = {}
    if head_end:
        targets["</head>"] = head_end
    if body_end:
        targets["</body>"] = body_end
    if not targets:
        return doc

    plan = []
    indent = ""
    newline = None
    previous = None
    for token in tokenize(doc):
        if token.kind == TokenKind.INDENT:
            indent = token.value
        elif token.kind == TokenKind.NEWLINE:
            # Inserted lines end like the document's first line.
            newline = newline or token.text
        elif token.kind == TokenKind.TAG_CLOSE and token.value in targets:
            hanging = (
                previous is not None
                and previous.kind == TokenKind.INDENT
                and (previous.offset == 0 or doc[previous.offset - 1] in "\r\n")
            )
            plan.append((token.offset, targets[token.value], indent, hanging))
        previous = token

    code = doc
    delta = 0
    for offset, fragment, fragment_indent, hanging in plan:
        text = _indent_fragment(fragment, fragment_indent, hanging, newline or "\n")
        code = insert(code, text, offset + delta)
        delta += len(text)
    return code
