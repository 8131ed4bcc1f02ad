import os

import pytest

from bytecache.api.errors import SourceNotFound, SourceUnavailable
from bytecache.storage.directory_getter import DirectoryGetter


@pytest.fixture
def source_dir(tmp_path):
    d = tmp_path / "source"
    d.mkdir()
    (d / "Tom").write_bytes(b"630")
    (d / "nested").mkdir()
    (d / "nested" / "Jack").write_bytes(b"589")
    (tmp_path / "secret").write_bytes(b"do not serve")
    return str(d)


@pytest.fixture
def getter(source_dir):
    return DirectoryGetter(source_dir)


def test_reads_file(getter):
    assert getter.get("Tom") == b"630"


def test_reads_nested_file(getter):
    assert getter.get("nested/Jack") == b"589"


def test_missing_file(getter):
    with pytest.raises(SourceNotFound) as excinfo:
        getter.get("ghost")
    assert excinfo.value.key == "ghost"


def test_directory_is_not_a_value(getter):
    with pytest.raises(SourceNotFound):
        getter.get("nested")


@pytest.mark.parametrize("key", ["../secret", "/etc/passwd", "nested/../../secret"])
def test_keys_cannot_escape_root(getter, key):
    with pytest.raises(SourceNotFound):
        getter.get(key)


@pytest.mark.skipif(os.geteuid() == 0, reason="root ignores file permissions")
def test_unreadable_file_is_unavailable(getter, source_dir):
    path = os.path.join(source_dir, "Tom")
    os.chmod(path, 0)
    try:
        with pytest.raises(SourceUnavailable):
            getter.get("Tom")
    finally:
        os.chmod(path, 0o644)
