import pytest

from selpath.core.cache import CompiledCache
from selpath.core.compiler import SelectorCompiler
from selpath.tree import LxmlTreeEvaluator


@pytest.fixture
def article_html():
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Test Page</title>
    </head>
    <body>
        <h1 class="title main-title">My Awesome Article</h1>
        <div class="meta" id="meta">
            <span class="author">Jane Doe</span>
            <span class="date" data-published="2023-10-27">Published 2023-10-27</span>
        </div>
        <article>
            <h2>First section</h2>
            <p class="lead">This is the content of the article.</p>
            <p>Contact: jane@example.com, phone 555-1234</p>
            <h2>Second section</h2>
            <p>More content.</p>
        </article>
        <ul class="items">
            <li class="item">One</li>
            <li class="item active">Two</li>
            <li class="item-x">Three</li>
            <li class="item">Four</li>
        </ul>
        <div class="related">
            <a href="/related1" lang="en-US">Related 1</a>
            <a href="https://example.com/page.pdf" lang="en">Related 2</a>
        </div>
        <form>
            <input type="text" name="q" placeholder="Search">
            <input type="checkbox" name="agree" checked="checked">
            <input type="hidden" name="token" value="abc">
        </form>
    </body>
    </html>
    """


@pytest.fixture
def evaluator(article_html):
    return LxmlTreeEvaluator(article_html)


@pytest.fixture
def compiler():
    return SelectorCompiler(cache=CompiledCache())


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line('markers', 'integration: marks tests as integration tests')
    config.addinivalue_line('markers', 'unit: marks tests as unit tests')


def pytest_collection_modifyitems(config, items):
    """Apply directory-based marks to collected test items."""

    for item in items:
        if hasattr(item, 'fspath'):
            file_path = str(item.fspath)

            if '/tests/integration/' in file_path:
                item.add_marker(pytest.mark.integration)
            elif '/tests/unit/' in file_path:
                item.add_marker(pytest.mark.unit)
