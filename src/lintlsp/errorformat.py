"""
Vim-style *errorformat* patterns.

An errorformat is a scanf-like template that describes one line of tool
output, e.g. ``%f:%l:%c: %m`` for ``src/main.c:10:4: expected ';'``.  Each
template is translated to a regular expression once; matching a line
returns a :class:`Match` with the extracted fields.

Supported conversions
---------------------

======== ==========================================================
``%f``   file name
``%l``   line number
``%c``   column number
``%v``   virtual column number (treated as a column)
``%m``   message
``%r``   rest of the line (used as the message)
``%t``   one-letter kind (``e``, ``w``, ...)
``%n``   error number
``%p``   pointer line of ``-``, ``.`` or spaces; column = length + 1
``%s``   search text (ignored)
``%*X``  scanf-style skip: ``%*[a-z]``, ``%*\\d``, ``%*\\s`` ...
``%%``   a literal ``%``
======== ==========================================================

``%.``, ``%#``, ``%^``, ``%$``, ``%[``, ``%~`` and ``%\\`` insert the
corresponding regex atom.  A template may start with ``%E``, ``%W``,
``%I``, ``%N`` or ``%A`` (sets the kind) or ``%-G`` (matching lines are
ignored).  Multi-line templates (``%C``, ``%Z``, ``%+``...) and directory
tracking are not supported and raise :class:`PatternCompileError`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from lintlsp.errors import PatternCompileError

# Regex fragment and group name for each value conversion.
_CONVERSIONS: dict[str, tuple[str, str | None]] = {
    'f': (r'(?:[A-Za-z]:)?(?:\\ |[^ ])+?', 'file'),
    'l': (r'\d+', 'line'),
    'c': (r'\d+', 'column'),
    'v': (r'\d+', 'vcol'),
    'm': (r'.+', 'message'),
    'r': (r'.*', 'rest'),
    't': (r'.', 'kind'),
    'n': (r'\d+', 'number'),
    'p': (r'[- .]*', 'pointer'),
    's': (r'.+', None),
}

# %<char> that stands for a regex atom rather than a value.
_ATOMS = {
    '.': '.',
    '#': '*',
    '^': r'\^',
    '$': r'\$',
    '[': '[',
    '~': '~',
    '\\': r'\\',
    '%': '%',
}

_KIND_PREFIXES = {'E': 'e', 'W': 'w', 'I': 'i', 'N': 'n', 'A': ''}
_UNSUPPORTED_PREFIXES = set('CZOPQDXG+')


@dataclass(frozen=True)
class Match:
    file: str
    line: int        # 1-based, 0 if the format has no %l
    column: int      # 1-based, 0 if unknown
    message: str
    kind: str = ''
    number: int = 0


class Pattern:
    """One compiled errorformat template."""

    def __init__(self, fmt: str):
        self.format = fmt
        self.kind = ''
        self.ignore = False
        body = self._strip_prefix(fmt)
        source = self._translate(body)
        try:
            self.regex = re.compile(f'^{source}$')
        except re.error as e:
            raise PatternCompileError(fmt, str(e)) from e

    def _strip_prefix(self, fmt: str) -> str:
        if fmt.startswith('%-G'):
            self.ignore = True
            return fmt[3:]
        if len(fmt) >= 2 and fmt[0] == '%':
            letter = fmt[1]
            if letter in _KIND_PREFIXES:
                self.kind = _KIND_PREFIXES[letter]
                return fmt[2:]
            if letter in _UNSUPPORTED_PREFIXES or letter == '-':
                raise PatternCompileError(fmt, f'unsupported prefix %{letter}')
        return fmt

    def _translate(self, body: str) -> str:
        out: list[str] = []
        seen: set[str] = set()
        i, n = 0, len(body)
        while i < n:
            ch = body[i]
            if ch != '%':
                out.append(re.escape(ch))
                i += 1
                continue
            if i + 1 >= n:
                raise PatternCompileError(self.format, 'trailing %')
            conv = body[i + 1]
            if conv in _CONVERSIONS:
                fragment, name = _CONVERSIONS[conv]
                if name is None:
                    out.append(f'(?:{fragment})')
                else:
                    if name in seen:
                        raise PatternCompileError(self.format, f'%{conv} used more than once')
                    seen.add(name)
                    out.append(f'(?P<{name}>{fragment})')
                i += 2
            elif conv == '*':
                skip, i = self._scanf_skip(body, i + 2)
                out.append(skip)
            elif conv in _ATOMS:
                out.append(_ATOMS[conv])
                i += 2
            else:
                raise PatternCompileError(self.format, f'unknown conversion %{conv}')
        return ''.join(out)

    def _scanf_skip(self, body: str, i: int) -> tuple[str, int]:
        """Translate the part after ``%*`` into a repeated class."""
        if i >= len(body):
            raise PatternCompileError(self.format, 'incomplete %*')
        if body[i] == '[':
            end = body.find(']', i + 2 if body[i + 1:i + 2] in (']', '^') else i + 1)
            if end < 0:
                raise PatternCompileError(self.format, 'unterminated %*[')
            return f'{body[i:end + 1]}*', end + 1
        if body[i] == '\\' and i + 1 < len(body):
            return f'{body[i:i + 2]}*', i + 2
        raise PatternCompileError(self.format, f'unsupported %*{body[i]}')

    def match(self, line: str) -> Match | None:
        m = self.regex.match(line)
        if m is None:
            return None
        groups = m.groupdict()
        column = 0
        if groups.get('column'):
            column = int(groups['column'])
        elif groups.get('vcol'):
            column = int(groups['vcol'])
        elif groups.get('pointer') is not None:
            column = len(groups['pointer']) + 1
        message = groups.get('message')
        if message is None:
            message = groups.get('rest') or ''
        return Match(
            file=(groups.get('file') or '').replace('\\ ', ' '),
            line=int(groups['line']) if groups.get('line') else 0,
            column=column,
            message=message,
            kind=(groups.get('kind') or self.kind).lower(),
            number=int(groups['number']) if groups.get('number') else 0,
        )

    def __repr__(self) -> str:
        return f'Pattern({self.format!r})'


class Errorformat:
    """An ordered list of :class:`Pattern` objects.

    Raises :class:`PatternCompileError` if any template is malformed.
    """

    def __init__(self, formats: Iterable[str]):
        self.patterns = [Pattern(f) for f in formats]

    def match(self, line: str) -> Match | None:
        """Return the match of the first pattern that accepts *line*."""
        line = line.rstrip('\r')
        for pattern in self.patterns:
            m = pattern.match(line)
            if m is None:
                continue
            if pattern.ignore:
                return None
            return m
        return None

    def scan(self, output: str) -> Iterator[Match]:
        """Yield a :class:`Match` for every line of *output* that matches."""
        for line in output.split('\n'):
            m = self.match(line)
            if m is not None:
                yield m
