from pathlib import Path

from selpath.utils.files import get_cache_path, get_logs_path, get_project_root, init_selpath, is_initialized


def test_get_project_root(monkeypatch, tmp_path):
    # Create a dummy project structure
    project_root = tmp_path / 'project'
    project_root.mkdir()
    (project_root / 'pyproject.toml').touch()

    sub_dir = project_root / 'src' / 'deep' / 'dir'
    sub_dir.mkdir(parents=True)

    # Simulate running from sub_dir
    monkeypatch.setattr(Path, 'cwd', lambda: sub_dir)

    root = get_project_root()
    assert root == project_root
    assert (root / 'pyproject.toml').exists()


def test_get_project_root_default(monkeypatch, tmp_path):
    # Falls back to CWD if no markers found
    monkeypatch.setattr(Path, 'cwd', lambda: tmp_path)

    root = get_project_root()
    assert root == tmp_path


def test_is_initialized(mocker, tmp_path):
    project_root = tmp_path / 'project'
    project_root.mkdir()
    (project_root / 'pyproject.toml').touch()

    mocker.patch('selpath.utils.files.get_project_root', return_value=project_root)

    assert not is_initialized()

    selpath_dir = init_selpath()
    assert is_initialized()

    assert selpath_dir == project_root / '.selpath'
    assert (selpath_dir / 'logs').is_dir()
    assert (selpath_dir / '.gitignore').read_text() == '# Automatically created by selpath\n*\n'


def test_init_selpath_keeps_existing_gitignore(mocker, tmp_path):
    mocker.patch('selpath.utils.files.get_project_root', return_value=tmp_path)
    gitignore = tmp_path / '.selpath' / '.gitignore'
    gitignore.parent.mkdir()
    gitignore.write_text('custom\n')

    init_selpath()
    assert gitignore.read_text() == 'custom\n'


def test_paths_live_under_selpath_dir(mocker, tmp_path):
    mocker.patch('selpath.utils.files.get_project_root', return_value=tmp_path)

    assert get_logs_path() == tmp_path / '.selpath' / 'logs'
    assert get_cache_path() == tmp_path / '.selpath' / 'compiled_cache.json'
