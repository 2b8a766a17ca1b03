from utils import sanitize_color, sanitize_name, sanitize_text


def test_sanitize_text_keeps_markup_and_truncates():
    assert sanitize_text('  <b>Molho</b> ') == '<b>Molho</b>'
    assert sanitize_text('Sal & Pimenta') == 'Sal & Pimenta'
    assert sanitize_text('abcdef', max_length=3) == 'abc'
    assert sanitize_text(None) == ''


def test_sanitize_text_keeps_line_breaks():
    assert sanitize_text('Misture\n\tAsse\x00 30 min\x07') == 'Misture\n\tAsse 30 min'


def test_sanitize_name_collapses_whitespace():
    assert sanitize_name('  Farinha \t de   Trigo\x00 ') == 'Farinha de Trigo'
    assert sanitize_name('Pães & Massas') == 'Pães & Massas'
    assert sanitize_name('') == ''
    assert sanitize_name(None) == ''


def test_sanitize_color():
    assert sanitize_color(' #3b82f6 ', '#000000') == '#3B82F6'
    assert sanitize_color('blue', '#000000') == '#000000'
    assert sanitize_color(None, '#111111') == '#111111'
