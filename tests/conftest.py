"""Common fixtures for all tests."""

import pytest


@pytest.fixture
def write_lines(tmp_path):
    """Write lines joined by ``\\n`` to a file under ``tmp_path`` and return its path as a string."""

    def _write(lines, name="sample.txt", trailing_newline=False):
        content = "\n".join(lines)
        if trailing_newline:
            content += "\n"
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write
