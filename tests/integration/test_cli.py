import json

import pytest

from selpath.cli import main


@pytest.fixture(autouse=True)
def project_dir(monkeypatch, tmp_path):
    """Run every command inside a throwaway project."""
    (tmp_path / 'pyproject.toml').touch()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv('LOGFIRE_TOKEN', raising=False)
    monkeypatch.setenv('LOGFIRE_IGNORE_NO_CONFIG', '1')
    monkeypatch.setenv('COLUMNS', '200')
    for name in ('SELPATH_MAX_NESTING_DEPTH', 'SELPATH_LOG_LEVEL', 'SELPATH_CACHE_FILE'):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def page(project_dir, article_html):
    path = project_dir / 'page.html'
    path.write_text(article_html, encoding='utf-8')
    return path


def test_compile_prints_xpath(capsys):
    main(['compile', 'h2 + p'])
    assert capsys.readouterr().out.strip() == '//h2/following-sibling::p[1]'


def test_compile_long_selector_is_not_wrapped(capsys):
    main(['compile', 'div.content > ul.items li.item:not(.active) a[href^="https"]'])
    out = capsys.readouterr().out.strip()
    assert '\n' not in out
    assert out.startswith('//div[contains(concat(" ",normalize-space(@class)," ")," content ")]/ul')


def test_compile_xpath_type(capsys):
    main(['compile', '//a[@id="x"]', '--type', 'xpath'])
    assert capsys.readouterr().out.strip() == '//a[@id="x"]'


def test_invalid_selector_exits_non_zero(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(['compile', 'a > > b'])
    assert exc_info.value.code == 1
    assert 'Invalid selector' in capsys.readouterr().out


def test_invalid_regex_exits_non_zero(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(['compile', '/(oops/', '--type', 'regex'])
    assert exc_info.value.code == 1
    assert 'Invalid regular expression' in capsys.readouterr().out


def test_detect(capsys):
    main(['detect', '//div'])
    main(['detect', '/\\d+/'])
    main(['detect', 'div > p'])
    assert capsys.readouterr().out.split() == ['xpath', 'regex', 'css']


def test_parse_shows_segments(capsys):
    main(['parse', 'ul > li.item:first-child'])
    out = capsys.readouterr().out
    assert 'Chain 1' in out
    assert 'child' in out
    assert 'first-child' in out


def test_query(page, capsys):
    main(['query', str(page), 'li.item'])
    out = capsys.readouterr().out
    assert '<li> One' in out
    assert '<li> Three' not in out
    assert '3 results' in out


def test_query_with_text_pseudo_element(page, capsys):
    main(['query', str(page), 'span.author::text'])
    assert 'Jane Doe' in capsys.readouterr().out


def test_query_failure_exits_non_zero(page):
    with pytest.raises(SystemExit) as exc_info:
        main(['query', str(page), '//li[', '--type', 'xpath'])
    assert exc_info.value.code == 1


def test_query_missing_file_exits_non_zero(project_dir):
    with pytest.raises(SystemExit) as exc_info:
        main(['query', str(project_dir / 'missing.html'), 'p'])
    assert exc_info.value.code == 1


def test_resolve(page, project_dir, capsys):
    descriptors = project_dir / 'descriptors.json'
    descriptors.write_text(
        json.dumps([{'selector': '.headline'}, {'selector': '//h1', 'type': 'xpath'}, {'selector': 'h2'}]),
        encoding='utf-8',
    )

    main(['resolve', str(page), str(descriptors)])
    out = capsys.readouterr().out
    assert 'matched' in out
    assert 'My Awesome Article' in out
    assert '1 results' in out

    main(['resolve', str(page), str(descriptors), '--all'])
    assert '3 results' in capsys.readouterr().out


def test_resolve_without_match_exits_non_zero(page, project_dir, capsys):
    descriptors = project_dir / 'descriptors.json'
    descriptors.write_text(json.dumps([{'selector': '.nothing'}]), encoding='utf-8')

    with pytest.raises(SystemExit) as exc_info:
        main(['resolve', str(page), str(descriptors)])
    assert exc_info.value.code == 1
    assert 'No descriptor matched' in capsys.readouterr().out


def test_resolve_rejects_non_list(page, project_dir):
    descriptors = project_dir / 'descriptors.json'
    descriptors.write_text(json.dumps({'selector': 'h1'}), encoding='utf-8')

    with pytest.raises(SystemExit) as exc_info:
        main(['resolve', str(page), str(descriptors)])
    assert exc_info.value.code == 1


def test_persisted_cache_round_trip(project_dir, capsys):
    main(['--persist-cache', 'compile', 'nav > a'])

    cache_file = project_dir / '.selpath' / 'compiled_cache.json'
    assert list(json.loads(cache_file.read_text(encoding='utf-8')).values()) == ['//nav/a']

    main(['cache', 'show'])
    out = capsys.readouterr().out
    assert '1 compiled selectors' in out

    main(['cache', 'clear'])
    assert json.loads(cache_file.read_text(encoding='utf-8')) == {}


def test_cache_file_from_environment(project_dir, monkeypatch):
    target = project_dir / 'custom' / 'cache.json'
    monkeypatch.setenv('SELPATH_CACHE_FILE', str(target))

    main(['--persist-cache', 'compile', 'p.x'])
    assert target.exists()


def test_log_file_option(project_dir, mocker):
    setup = mocker.patch('selpath.cli.setup_local_logging', return_value=project_dir / 'run.log')

    main(['--log-file', '--log-level', 'debug', 'compile', 'p'])

    setup.assert_called_once_with('DEBUG')
    assert (project_dir / '.selpath' / 'logs').is_dir()
