import pytest

from documents import (
    EXTENSION_REQUIRED,
    NAME_REQUIRED,
    NAME_TAKEN,
    UNSUPPORTED_EXTENSION,
    DocumentKind,
    DocumentNotFound,
    DocumentStore,
    split_copy_suffix,
)


@pytest.fixture
def store(tmp_path):
    root = tmp_path / "data"
    root.mkdir()
    return DocumentStore(root)


def test_list_is_sorted_and_skips_directories(store):
    store.write("history.txt", "")
    store.write("about.md", "")
    (store.root / "nested").mkdir()
    assert store.list() == ["about.md", "history.txt"]


def test_list_missing_directory(tmp_path):
    assert DocumentStore(tmp_path / "absent").list() == []


def test_read_missing_raises(store):
    with pytest.raises(DocumentNotFound) as exc:
        store.read("nope.txt")
    assert str(exc.value) == "nope.txt does not exist."


def test_write_overwrites(store):
    store.write("notes.txt", "first")
    store.write("notes.txt", "second")
    assert store.read("notes.txt") == "second"


def test_delete(store):
    store.write("notes.txt", "x")
    store.delete("notes.txt")
    assert not store.exists("notes.txt")
    with pytest.raises(DocumentNotFound):
        store.delete("notes.txt")


@pytest.mark.parametrize("name", ["../secret.txt", "..", "a/b.txt", ""])
def test_names_outside_store_are_not_found(store, name):
    (store.root.parent / "secret.txt").write_text("hidden")
    assert not store.exists(name)
    with pytest.raises(DocumentNotFound):
        store.read(name)


@pytest.mark.parametrize("ext", [".txt", ".md"])
def test_create_new_supported(store, ext):
    assert store.create_new("info" + ext) is None
    assert "info" + ext in store.list()
    assert store.read("info" + ext) == ""


@pytest.mark.parametrize("name, message", [
    ("", NAME_REQUIRED),
    ("info", EXTENSION_REQUIRED),
    ("info.pdf", UNSUPPORTED_EXTENSION),
    ("../info.txt", NAME_REQUIRED),
])
def test_create_new_rejected(store, name, message):
    assert store.create_new(name) == message


def test_create_new_collision(store):
    store.write("info.txt", "keep")
    assert store.create_new("info.txt") == NAME_TAKEN
    assert store.read("info.txt") == "keep"


def test_kind_for_name():
    assert DocumentKind.for_name("a.txt") is DocumentKind.PLAIN_TEXT
    assert DocumentKind.for_name("a.md") is DocumentKind.MARKDOWN
    assert DocumentKind.for_name("a.pdf") is None


def test_render_markdown(store):
    store.write("about.md", "# Ruby is...")
    body, mimetype = store.render("about.md")
    assert mimetype == "text/html"
    assert "<h1>Ruby is...</h1>" in body


def test_render_plain_text_is_verbatim(store):
    store.write("history.txt", "# not a heading")
    assert store.render("history.txt") == ("# not a heading", "text/plain")


@pytest.mark.parametrize("stem, expected", [
    ("history", ("history", 1)),
    ("history(1)", ("history", 2)),
    ("history(12)", ("history", 13)),
    ("a(b)", ("a(b)", 1)),
    ("(3)x", ("(3)x", 1)),
])
def test_split_copy_suffix(stem, expected):
    assert split_copy_suffix(stem) == expected


def test_duplicate_copies_content(store):
    store.write("history.txt", "1993 - Yukihiro Matsumoto")
    assert store.duplicate("history.txt") == "history(1).txt"
    assert store.read("history(1).txt") == "1993 - Yukihiro Matsumoto"
    assert store.read("history.txt") == "1993 - Yukihiro Matsumoto"


def test_duplicate_twice(store):
    store.write("history.txt", "")
    store.duplicate("history.txt")
    assert store.duplicate("history.txt") == "history(2).txt"


def test_duplicate_of_copy_counts_from_its_suffix(store):
    store.write("notes(4).md", "")
    assert store.duplicate("notes(4).md") == "notes(5).md"


def test_duplicate_fills_first_gap_after_source_number(store):
    for name in ("history.txt", "history(1).txt", "history(3).txt"):
        store.write(name, "")
    assert store.next_copy_name("history.txt") == "history(2).txt"


def test_duplicate_never_overwrites(store):
    store.write("a.txt", "source")
    store.write("a(1).txt", "existing")
    store.duplicate("a.txt")
    assert store.read("a(1).txt") == "existing"
    assert store.read("a(2).txt") == "source"


def test_duplicate_missing(store):
    with pytest.raises(DocumentNotFound):
        store.duplicate("ghost.txt")


def test_create_new_over_directory_is_taken(store):
    (store.root / "info.txt").mkdir()
    assert store.create_new("info.txt") == NAME_TAKEN
    assert store.list() == []


def test_duplicate_skips_directory_with_candidate_name(store):
    store.write("history.txt", "content")
    (store.root / "history(1).txt").mkdir()
    assert store.duplicate("history.txt") == "history(2).txt"
    assert store.read("history(2).txt") == "content"
