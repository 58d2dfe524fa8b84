class TokenKind:
    TAG_OPEN = "tag_open"
    TAG_CLOSE = "tag_close"
    TAG_SELF_CLOSE = "tag_self_close"
    TAG_END = "tag_end"
    DOC_TYPE = "doc_type"
    COMMENT_START = "comment_start"
    COMMENT_END = "comment_end"
    COMMENT_BODY = "comment_body"
    ATTR_NAME = "attr_name"
    ATTR_ASSIGNMENT = "attr_assignment"
    ATTR_VALUE = "attr_value"
    ATTR_END = "attr_end"
    INDENT = "indent"
    NEWLINE = "newline"
    TEXT = "text"

    # Tokens that close the tag opened by the last TAG_OPEN.
    TAG_TERMINATORS = frozenset((TAG_END, TAG_SELF_CLOSE))


class Token:
    __slots__ = ("kind", "line_breaks", "offset", "text", "value")

    def __init__(self, kind, text, value, offset, line_breaks=False):
        self.kind = kind
        self.text = text
        self.value = value
        self.offset = offset
        self.line_breaks = bool(line_breaks)

    def __repr__(self):
        if self.value != self.text:
            return f"<{self.kind}@{self.offset} {self.text!r} -> {self.value!r}>"
        return f"<{self.kind}@{self.offset} {self.text!r}>"

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.text == other.text
            and self.value == other.value
            and self.offset == other.offset
        )

    __hash__ = None  # Unhashable since we define __eq__

    @property
    def end(self):
        return self.offset + len(self.text)
