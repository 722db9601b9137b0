import pytest

from selpath.core.pseudo import compile_nth, compile_pseudo, compile_slice, parse_nth
from selpath.exceptions import InvalidSelectorError

WORD_ACTIVE = 'contains(concat(" ",normalize-space(@class)," ")," active ")'


def predicate_holds(predicate, position, last):
    """Evaluate an arithmetic nth predicate for one sibling position."""
    expression = (
        predicate[1:-1]
        .replace('position()', 'p')
        .replace('last()', 'n')
        .replace(' mod ', ' % ')
        .replace(' = ', ' == ')
    )
    return eval(expression, {}, {'p': position, 'n': last})  # noqa: S307


def css_nth_matches(a, b, index):
    """Whether 1-based ``index`` is a*k+b for some k >= 0."""
    if a == 0:
        return index == b
    k, remainder = divmod(index - b, a)
    return remainder == 0 and k >= 0


@pytest.mark.parametrize(
    ('formula', 'terms'),
    [
        ('even', (2, 0)),
        ('odd', (2, 1)),
        ('2n+1', (2, 1)),
        ('3n+2', (3, 2)),
        ('-n+3', (-1, 3)),
        ('5', (0, 5)),
        ('3n-1', (3, -1)),
        ('3n-4', (3, -4)),
        ('n', (1, 0)),
        ('-2n+5', (-2, 5)),
        (' 2n + 4 ', (2, 4)),
    ],
)
@pytest.mark.parametrize('last', range(1, 51))
def test_nth_child_totality(formula, terms, last):
    predicate = compile_nth(formula)
    a, b = terms
    selected = {p for p in range(1, last + 1) if predicate_holds(predicate, p, last)}
    expected = {p for p in range(1, last + 1) if css_nth_matches(a, b, p)}
    assert selected == expected


@pytest.mark.parametrize(
    ('formula', 'terms'),
    [('even', (2, 0)), ('odd', (2, 1)), ('3n', (3, 0)), ('2n+1', (2, 1)), ('-n+3', (-1, 3)), ('5', (0, 5))],
)
def test_nth_last_child_counts_from_the_end(formula, terms):
    predicate = compile_nth(formula, reverse=True)
    a, b = terms
    last = 20
    selected = {p for p in range(1, last + 1) if predicate_holds(predicate, p, last)}
    expected = {p for p in range(1, last + 1) if css_nth_matches(a, b, last - p + 1)}
    assert selected == expected


def test_nth_forms():
    assert compile_pseudo('nth-child', '5') == '[position() = 5]'
    assert compile_pseudo('nth-child', 'even') == '[position() mod 2 = 0]'
    assert compile_pseudo('nth-child', 'ODD') == '[position() mod 2 = 1]'
    assert compile_pseudo('nth-last-child', '2') == '[position() = last() - (2 - 1)]'
    assert compile_pseudo('nth-of-type', '2n', tag='p') == '[(count(preceding-sibling::p) + 1) mod 2 = 0]'
    assert compile_pseudo('nth-last-of-type', '1', tag='li') == '[(count(following-sibling::li) + 1) = 1]'


def test_nth_unrecognised_formula_is_empty():
    assert compile_nth('banana') == ''
    assert compile_nth('2x+1') == ''
    assert parse_nth('n+') is None


def test_sibling_family():
    assert compile_pseudo('first-child') == '[not(preceding-sibling::*)]'
    assert compile_pseudo('last-child') == '[not(following-sibling::*)]'
    assert compile_pseudo('only-child') == '[not(preceding-sibling::*) and not(following-sibling::*)]'
    assert compile_pseudo('first-of-type', tag='p') == '[not(preceding-sibling::p)]'
    assert compile_pseudo('last-of-type', tag='p') == '[not(following-sibling::p)]'


def test_names_are_case_insensitive():
    assert compile_pseudo('First-Child') == compile_pseudo('first-child')


def test_unknown_pseudo_is_empty(caplog):
    with caplog.at_level('DEBUG', logger='selpath.core.pseudo'):
        assert compile_pseudo('marquee') == ''
    assert 'marquee' in caplog.text


def test_text_family_strips_quotes():
    assert compile_pseudo('contains', '"Hello"') == '[contains(string(.),"Hello")]'
    assert compile_pseudo('contains', "'Hello'") == '[contains(string(.),"Hello")]'
    assert compile_pseudo('contains-text', 'Hi') == '[contains(text(),"Hi")]'
    assert compile_pseudo('starts-with', 'Pub') == '[starts-with(string(.),"Pub")]'
    assert compile_pseudo('ends-with', 'end') == (
        '[substring(string(.),string-length(string(.))-string-length("end")+1)="end"]'
    )


def test_text_with_double_quote_uses_single_quoted_literal():
    assert compile_pseudo('contains', 'say "hi"') == '[contains(string(.),\'say "hi"\')]'


def test_text_match():
    assert compile_pseudo('text-match', 'Pub*') == '[starts-with(normalize-space(.),"Pub")]'
    assert compile_pseudo('text-match', 'Exact') == '[normalize-space(.)="Exact"]'


def test_positional_shorthands():
    assert compile_pseudo('first') == '[1]'
    assert compile_pseudo('last') == '[last()]'
    assert compile_pseudo('even') == '[position() mod 2 = 0]'
    assert compile_pseudo('odd') == '[position() mod 2 = 1]'
    assert compile_pseudo('eq', '0') == '[position() = 1]'
    assert compile_pseudo('gt', '2') == '[position() > 3]'
    assert compile_pseudo('lt', '2') == '[position() < 3]'
    assert compile_pseudo('eq', 'x') == ''
    assert compile_pseudo('between', '2,4') == '[position() >= 2 and position() <= 4]'
    assert compile_pseudo('between', '2') == '[true()]'


@pytest.mark.parametrize(
    ('arg', 'expected'),
    [
        ('0:', ''),
        (':', ''),
        ('2:', '[position() >= 3]'),
        (':3', '[position() <= 3]'),
        ('1:3', '[position() >= 2 and position() < 4]'),
        ('1:+2', '[position() >= 2 and position() <= 3]'),
        ('0:+0', '[false()]'),
        ('abc', ''),
    ],
)
def test_slice(arg, expected):
    assert compile_slice(arg) == expected


def test_counting_family():
    assert compile_pseudo('children-gt', '2') == '[count(*) > 2]'
    assert compile_pseudo('attr-count-eq', '1') == '[count(@*) = 1]'
    assert compile_pseudo('text-length-lt', '10') == '[string-length(normalize-space(.)) < 10]'
    assert compile_pseudo('attr-length-gt', 'href, 5') == '[@href and string-length(@href) > 5]'
    assert compile_pseudo('attr-length-gt', 'href') == '[true()]'
    assert compile_pseudo('depth-between', '1,3') == '[count(ancestor::*) >= 1 and count(ancestor::*) <= 3]'


def test_attribute_family():
    assert compile_pseudo('has-attr', 'href') == '[@href]'
    assert compile_pseudo('data', 'id') == '[@data-id]'
    assert compile_pseudo('lang', 'en') == '[@lang="en" or starts-with(@lang,"en-")]'
    assert compile_pseudo('attr-match', 'href, /docs*') == '[@href and starts-with(@href,"/docs")]'


def test_static_table_entries():
    assert compile_pseudo('checked') == '[@checked="checked" or @checked]'
    assert compile_pseudo('header').startswith('[self::h1 or')
    assert compile_pseudo('root') == '[not(parent::*)]'
    assert compile_pseudo('hover') == '[@hover]'
    assert compile_pseudo('focus-within') == '[descendant::*[@focus] or ancestor::*[@focus]]'
    assert compile_pseudo('target').startswith('[@name=substring-after(.,"#")')
    assert compile_pseudo('valid') == '[@valid="valid"]'
    assert compile_pseudo('invalid') == '[@invalid="invalid"]'
    assert compile_pseudo('datetime') == '[@type="datetime"]'
    assert compile_pseudo('table-row') == '[self::tr]'
    assert compile_pseudo('table-header') == '[self::th]'


@pytest.mark.parametrize('name', ['video', 'svg', 'head', 'figcaption', 'dialog', 'table', 'tfoot', 'dd', 'legend', 'nav'])
def test_element_name_entries(name):
    assert compile_pseudo(name) == f'[self::{name}]'


def test_not_negates_id_classes_and_equals_attributes():
    assert compile_pseudo('not', '.active') == f'[not({WORD_ACTIVE})]'
    assert compile_pseudo('not', '#main') == '[not(@id="main")]'
    assert compile_pseudo('not', '[type="hidden"]') == '[not(@type="hidden")]'
    assert compile_pseudo('not', '#a.active') == f'[not(@id="a") and not({WORD_ACTIVE})]'


def test_not_ignores_what_it_cannot_negate():
    assert compile_pseudo('not', 'p') == ''
    assert compile_pseudo('not', '[href^="http"]') == ''
    assert compile_pseudo('not', '.a > .b') == '[not(contains(concat(" ",normalize-space(@class)," ")," a "))]'


def test_has_builds_descendant_tests():
    assert compile_pseudo('has', 'img') == '[descendant::img]'
    assert compile_pseudo('has', 'a.x, img') == (
        '[descendant::a[contains(concat(" ",normalize-space(@class)," ")," x ")] or descendant::img]'
    )


def test_has_nests_recursively():
    assert compile_pseudo('has', 'li:has(a)') == '[descendant::li[descendant::a]]'


def test_recursion_depth_is_bounded():
    with pytest.raises(InvalidSelectorError):
        compile_pseudo('has', 'li:has(a:has(b))', max_depth=1)
