"""Tests for lintlsp.errorformat — errorformat compilation and matching."""
from __future__ import annotations

import pytest

from lintlsp.errorformat import Errorformat, Match, Pattern
from lintlsp.errors import PatternCompileError


class TestPattern:
    def test_file_line_message(self):
        m = Pattern('%f:%l:%m').match('main.c:10:unexpected token')
        assert m == Match(file='main.c', line=10, column=0, message='unexpected token')

    def test_file_line_column_message(self):
        m = Pattern('%f:%l:%c: %m').match('src/app.py:3:14: E225 missing whitespace')
        assert m.file == 'src/app.py'
        assert (m.line, m.column) == (3, 14)
        assert m.message == 'E225 missing whitespace'

    def test_no_match_returns_none(self):
        assert Pattern('%f:%l:%c:%m').match('main.c:10:oops') is None

    def test_literal_characters_are_escaped(self):
        p = Pattern('%f(%l): %m')
        m = p.match('main.c(12): bad')
        assert (m.file, m.line, m.message) == ('main.c', 12, 'bad')
        assert p.match('main.cX12): bad') is None

    def test_drive_letter_file(self):
        m = Pattern('%f:%l:%c:%m').match('C:/src/main.c:1:2:msg')
        assert m.file == 'C:/src/main.c'
        assert (m.line, m.column) == (1, 2)

    def test_kind_and_number(self):
        m = Pattern('%f:%l: %t%n: %m').match('a.sh:4: W2086: quote this')
        assert m.kind == 'w'
        assert m.number == 2086
        assert m.message == 'quote this'

    def test_kind_prefix(self):
        m = Pattern('%W%f:%l:%m').match('a.c:1:careful')
        assert m.kind == 'w'

    def test_scanf_skip(self):
        m = Pattern('%*[^:]: %f:%l: %m').match('lint: x.c:7: trailing space')
        assert (m.file, m.line, m.message) == ('x.c', 7, 'trailing space')

    def test_percent_literal(self):
        m = Pattern('%f:%l:%%%m').match('a.c:2:%bad')
        assert m.message == 'bad'

    def test_rest_of_line_is_message(self):
        m = Pattern('%f:%l:%r').match('a.c:2:')
        assert m.message == ''

    def test_pointer_sets_column(self):
        m = Pattern('%p^').match('    ^')
        assert m.column == 5

    def test_virtual_column(self):
        m = Pattern('%f:%l:%v:%m').match('a.c:2:9:x')
        assert m.column == 9


class TestPatternCompileErrors:
    @pytest.mark.parametrize('fmt', [
        '%f:%l:%',           # trailing %
        '%f:%l:%q',          # unknown conversion
        '%f:%f:%m',          # duplicate field
        '%C%m',              # multi-line continuation
        '%Z%m',
        '%f:%l:%*[abc',      # unterminated class
        '%f:%l:%[',          # broken regex atom
    ])
    def test_malformed(self, fmt):
        with pytest.raises(PatternCompileError):
            Pattern(fmt)

    def test_errorformat_reports_bad_member(self):
        with pytest.raises(PatternCompileError) as info:
            Errorformat(['%f:%l:%m', '%f:%l:%y'])
        assert info.value.pattern == '%f:%l:%y'


class TestErrorformat:
    def test_first_pattern_wins(self):
        efm = Errorformat(['%f:%l:%c:%m', '%f:%l:%m'])
        m = efm.match('a.c:3:4:bad')
        assert (m.line, m.column, m.message) == (3, 4, 'bad')

    def test_order_matters(self):
        efm = Errorformat(['%f:%l:%m', '%f:%l:%c:%m'])
        m = efm.match('a.c:3:4:bad')
        assert m.column == 0
        assert m.message == '4:bad'

    def test_ignore_pattern(self):
        efm = Errorformat(['%-G%f:%l: note: %m', '%f:%l: %m'])
        assert efm.match('a.c:1: note: see here') is None
        assert efm.match('a.c:1: error here').message == 'error here'

    def test_scan_skips_unmatched_lines(self):
        efm = Errorformat(['%f:%l:%m'])
        output = 'checking...\na.c:1:one\n\nsummary: 2 problems\r\nb.c:2:two\r\n'
        assert [(m.file, m.line, m.message) for m in efm.scan(output)] == [
            ('a.c', 1, 'one'),
            ('b.c', 2, 'two'),
        ]

    def test_no_patterns(self):
        assert list(Errorformat([]).scan('a.c:1:x')) == []
