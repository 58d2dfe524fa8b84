"""Streaming markup tokenizer.

This is not an HTML parser. It only knows where tags, attributes and
comments start and end, which is all the import scanner and the document
rewriter need. Every character of the input ends up in exactly one token,
so joining the token texts gives back the original document and token
offsets can be used to splice text into it.
"""

import re

from .tokens import Token, TokenKind

_WHITESPACE_PATTERN = re.compile(r"\s")

# Rules are tried in order; the first alternative that matches wins.
_MAIN_PATTERN = re.compile(
    "|".join(
        (
            rf"(?P<{TokenKind.COMMENT_START}><!--)",
            rf"(?P<{TokenKind.DOC_TYPE}><![^>]+>)",
            rf"(?P<{TokenKind.TAG_CLOSE}></\s*[a-zA-Z][a-zA-Z0-9:-]*\s*>)",
            rf"(?P<{TokenKind.TAG_OPEN}><\s*[a-zA-Z][a-zA-Z0-9:-]*)",
            rf"(?P<{TokenKind.NEWLINE}>\r\n|\r|\n)",
            rf"(?P<{TokenKind.INDENT}>[ \t]+)",
            rf"(?P<{TokenKind.TEXT}><|[^<\r\n]+)",
        )
    )
)
_COMMENT_PATTERN = re.compile(
    "|".join(
        (
            rf"(?P<{TokenKind.COMMENT_END}>\s*-->)",
            rf"(?P<{TokenKind.COMMENT_BODY}>[\s\S]+?(?=\s*-->)|[\s\S]+)",
        )
    )
)
_TAG_PATTERN = re.compile(
    "|".join(
        (
            rf"(?P<{TokenKind.TAG_SELF_CLOSE}>/>)",
            rf"(?P<{TokenKind.TAG_END}>>)",
            rf"(?P<{TokenKind.ATTR_NAME}>[^\s\"'<>/=]+)",
            rf"(?P<{TokenKind.TEXT}>\s+|[\s\S])",
        )
    )
)
_ATTR_ASSIGNMENT_PATTERN = re.compile(r"\s*=\s*")
_ATTR_VALUE_PATTERN = re.compile(r"\"[^\"]*\"|'[^']*'|[^\s\"'<>=`]+")
_ATTR_END_PATTERN = re.compile(r"\s+")


def _normalize_attr_value(text):
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1]
    return f'"{text}"'


def _normalize(kind, text):
    if kind == TokenKind.TAG_OPEN:
        return _WHITESPACE_PATTERN.sub("", text[1:]).lower()
    if kind == TokenKind.TAG_CLOSE:
        return _WHITESPACE_PATTERN.sub("", text).lower()
    if kind == TokenKind.ATTR_NAME:
        return text.lower()
    if kind == TokenKind.ATTR_ASSIGNMENT:
        return text.strip()
    if kind == TokenKind.ATTR_VALUE:
        return _normalize_attr_value(text)
    return text


class Tokenizer:
    """Pull-based tokenizer with an explicit lexer mode stack.

    Call ``next_token()`` until it returns ``None``, or iterate. Malformed
    markup never raises; unterminated tags and comments simply run to the
    end of the input.
    """

    MAIN = "main"
    TAG = "tag"
    ATTRIBUTE = "attribute"
    COMMENT = "comment"

    _PATTERNS = {
        MAIN: _MAIN_PATTERN,
        TAG: _TAG_PATTERN,
        COMMENT: _COMMENT_PATTERN,
    }
    _PUSHES = {
        TokenKind.TAG_OPEN: TAG,
        TokenKind.COMMENT_START: COMMENT,
        TokenKind.ATTR_NAME: ATTRIBUTE,
    }
    _POPS = frozenset(
        (
            TokenKind.COMMENT_END,
            TokenKind.TAG_END,
            TokenKind.TAG_SELF_CLOSE,
            TokenKind.ATTR_VALUE,
            TokenKind.ATTR_END,
        )
    )

    __slots__ = ("buffer", "expect_value", "length", "modes", "pos")

    def __init__(self, html):
        self.buffer = html or ""
        self.length = len(self.buffer)
        self.pos = 0
        self.modes = [self.MAIN]
        self.expect_value = False

    def __iter__(self):
        return self

    def __next__(self):
        token = self.next_token()
        if token is None:
            raise StopIteration
        return token

    @property
    def mode(self):
        return self.modes[-1]

    def next_token(self):
        while self.pos < self.length:
            mode = self.modes[-1]
            if mode == self.ATTRIBUTE:
                token = self._next_attribute_token()
                if token is None:
                    # Not part of the attribute; the tag mode reconsumes it.
                    self._pop_mode()
                    continue
                return token
            match = self._PATTERNS[mode].match(self.buffer, self.pos)
            return self._emit(match.lastgroup, match.group())
        return None

    # ---------------------
    # Helper methods
    # ---------------------

    def _next_attribute_token(self):
        buffer = self.buffer
        pos = self.pos
        if self.expect_value:
            self.expect_value = False
            match = _ATTR_VALUE_PATTERN.match(buffer, pos)
            if match:
                return self._emit(TokenKind.ATTR_VALUE, match.group())
            return None
        match = _ATTR_ASSIGNMENT_PATTERN.match(buffer, pos)
        if match:
            self.expect_value = True
            return self._emit(TokenKind.ATTR_ASSIGNMENT, match.group())
        match = _ATTR_END_PATTERN.match(buffer, pos)
        if match:
            return self._emit(TokenKind.ATTR_END, match.group())
        return None

    def _emit(self, kind, text):
        token = Token(kind, text, _normalize(kind, text), self.pos, "\n" in text or "\r" in text)
        self.pos += len(text)
        mode = self._PUSHES.get(kind)
        if mode is not None:
            self.modes.append(mode)
        elif kind in self._POPS:
            self._pop_mode()
        return token

    def _pop_mode(self):
        self.expect_value = False
        if len(self.modes) > 1:
            self.modes.pop()


def tokenize(html):
    """Return a lazy token iterator over ``html``."""
    return Tokenizer(html)
