from assets.photo_library import PhotoLibrary


def _touch(path):
    path.write_bytes(b"\x00")
    return path


def test_poll_reports_new_images_sorted(tmp_path):
    _touch(tmp_path / "b.png")
    _touch(tmp_path / "a.JPG")
    _touch(tmp_path / "notes.txt")
    lib = PhotoLibrary(tmp_path)
    new = lib.poll()
    assert new == [str(tmp_path / "a.JPG"), str(tmp_path / "b.png")]
    assert lib.poll() == []
    assert len(lib) == 2


def test_poll_is_append_only(tmp_path):
    first = _touch(tmp_path / "m.webp")
    lib = PhotoLibrary(tmp_path)
    lib.poll()
    _touch(tmp_path / "a.jpeg")
    first.unlink()
    assert lib.poll() == [str(tmp_path / "a.jpeg")]
    assert lib.refs == (str(tmp_path / "m.webp"), str(tmp_path / "a.jpeg"))


def test_missing_folder_is_empty(tmp_path):
    lib = PhotoLibrary(tmp_path / "nope")
    assert lib.poll() == []
    assert lib.poll() == []
    assert len(lib) == 0
