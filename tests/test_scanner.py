import pytest

from gos.errors import LexError
from gos.scanner import scan, tokenize


def kinds(source):
    return [t.kind for t in tokenize(source)]


def test_keywords_identifiers_and_eof():
    tokens = tokenize('fn add(a, b_2) { return a }')
    assert [t.kind for t in tokens] == [
        'FN', 'IDENT', '(', 'IDENT', ',', 'IDENT', ')', '{', 'RETURN', 'IDENT', '}', 'EOF',
    ]
    assert tokens[1].text == 'add'
    assert tokens[5].text == 'b_2'
    assert tokens[-1].text == ''


def test_in_is_not_reserved():
    assert kinds('for x in xs') == ['FOR', 'IDENT', 'IDENT', 'IDENT', 'EOF']


def test_two_char_operators_are_greedy():
    assert kinds('a == b != c <= d >= e = !f') == [
        'IDENT', '==', 'IDENT', '!=', 'IDENT', '<=', 'IDENT', '>=', 'IDENT', '=', '!', 'IDENT', 'EOF',
    ]


def test_numbers_and_ranges():
    tokens = tokenize('1..10 2.5 3. 7')
    assert [(t.kind, t.text) for t in tokens[:-1]] == [
        ('INT', '1'), ('..', '..'), ('INT', '10'), ('FLOAT', '2.5'), ('FLOAT', '3.'), ('INT', '7'),
    ]


def test_second_dot_in_number():
    with pytest.raises(LexError) as exc:
        tokenize('1.2.3')
    assert 'second "."' in exc.value.message


def test_string_escapes():
    tokens = tokenize(r'"say \"hi\"\n\tnow\\"')
    assert tokens[0].kind == 'STRING'
    assert tokens[0].text == 'say "hi"\n\tnow\\'


def test_string_spans_lines():
    tokens = tokenize('"one\ntwo" x')
    assert tokens[0].text == 'one\ntwo'
    assert tokens[1].line == 2


def test_unterminated_string():
    with pytest.raises(LexError) as exc:
        tokenize('x = "abc')
    assert exc.value.message == 'unterminated string literal'
    assert exc.value.kind == 'LexicalError'


def test_comments_produce_no_tokens():
    source = '// line comment\nx /* block\ncomment */ / 2'
    assert kinds(source) == ['IDENT', '/', 'INT', 'EOF']


def test_unterminated_block_comment():
    with pytest.raises(LexError) as exc:
        tokenize('x /* never closed')
    assert exc.value.message == 'unterminated block comment'


def test_unknown_character():
    with pytest.raises(LexError) as exc:
        tokenize('x = 1 @ 2')
    assert '@' in exc.value.message
    assert (exc.value.line, exc.value.column) == (1, 7)


def test_positions():
    tokens = tokenize('a\n  bb')
    assert (tokens[0].line, tokens[0].column) == (1, 1)
    assert (tokens[1].line, tokens[1].column) == (2, 3)


def test_scan_is_lazy():
    stream = scan('a b @')
    assert next(stream).text == 'a'
    assert next(stream).text == 'b'
    with pytest.raises(LexError):
        next(stream)
