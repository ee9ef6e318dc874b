from unittest import mock

import pytest

from warren import (
    BadRequestError,
    NoEntryInGophermapError,
    NoGophermapError,
    RequestContext,
    ResourceNotFoundError,
    StaticGopherApplication,
    Status,
)

GOPHERMAP = (
    "iHello\t(NULL)\t(NULL)\t0\n"
    "0About me\t/me_txt\t127.0.0.1\t7071\n"
    "9A binary\t/bin\t127.0.0.1\t7071\n"
    "1Docs\t/docs\tlocalhost\t7071\n"
)


@pytest.fixture
def root(tmp_path):
    root = tmp_path.resolve() / "gopher"
    root.mkdir()
    (root / "gophermap").write_text(GOPHERMAP)
    (root / "me_txt").write_text("Hello from me\n")
    (root / "bin").write_bytes(b"\x00\x01\x02")
    (root / "undocumented").write_text("Nobody knows\n")
    (root / "empty").mkdir()
    (root / "empty" / "orphan").write_text("Orphan\n")

    docs = root / "docs"
    docs.mkdir()
    (docs / "gophermap").write_text("0Readme\t/docs/readme\tlocalhost\t7071\n")
    (docs / "readme").write_text("Read me\n")
    return root


@pytest.fixture
def app(root):
    return StaticGopherApplication(
        root_directory=str(root), hosts=["127.0.0.1", "localhost"], port=7071
    )


def request(app, request_line):
    response = app({"REQUEST_LINE": request_line})
    body = b"".join(response.body) if response.body is not None else None
    return response, body


def test_root_must_exist(tmp_path):
    with pytest.raises(FileNotFoundError):
        StaticGopherApplication(root_directory=str(tmp_path / "missing"))


def test_root_must_be_directory(tmp_path):
    path = tmp_path / "file"
    path.write_text("")
    with pytest.raises(NotADirectoryError):
        StaticGopherApplication(root_directory=str(path))


def test_config(app, root):
    assert app.root == root
    assert app.hosts == frozenset(["127.0.0.1", "localhost"])
    assert app.port == "7071"


@pytest.mark.parametrize("request_line", ["", "/", "//", "/."])
def test_root_directory(app, request_line):
    response, body = request(app, request_line)
    assert response.status == Status.TEXT
    assert body == GOPHERMAP.encode()


def test_subdirectory(app, root):
    response, body = request(app, "/docs")
    assert response.status == Status.TEXT
    assert body == (root / "docs" / "gophermap").read_bytes()


def test_text_file(app):
    response, body = request(app, "/me_txt")
    assert response.status == Status.TEXT
    assert body == b"Hello from me\n"


def test_binary_file(app):
    response, body = request(app, "/bin")
    assert response.status == Status.BINARY
    assert body == b"\x00\x01\x02"


def test_nested_file(app):
    response, body = request(app, "/docs/readme")
    assert response.status == Status.TEXT
    assert body == b"Read me\n"


def test_bad_request(app):
    response, body = request(app, None)
    assert response.status == Status.BAD_REQUEST
    assert response.message == BadRequestError.message
    assert body is None


def test_not_found(app):
    response, body = request(app, "/missing")
    assert response.status == Status.NOT_FOUND
    assert response.message == ResourceNotFoundError.message
    assert body is None


def test_no_entry(app):
    response, _ = request(app, "/undocumented")
    assert response.status == Status.NO_ENTRY
    assert response.message == NoEntryInGophermapError.message


def test_no_entry_without_leading_slash(app):
    """
    Selectors are looked up in the gophermap exactly as they were sent.
    """
    response, _ = request(app, "me_txt")
    assert response.status == Status.NO_ENTRY


def test_no_gophermap_for_directory(app):
    response, _ = request(app, "/empty")
    assert response.status == Status.NO_GOPHERMAP
    assert response.message == NoGophermapError.message


def test_no_gophermap_for_file(app):
    response, _ = request(app, "/empty/orphan")
    assert response.status == Status.NO_GOPHERMAP


def test_unreadable_gophermap(app):
    with mock.patch.object(app.gophermaps, "load", side_effect=PermissionError):
        response, _ = request(app, "/me_txt")
    assert response.status == Status.NO_GOPHERMAP


@pytest.mark.parametrize(
    "request_line", ["..", "../../etc/passwd", "/../secret", "/docs/../.."]
)
def test_path_injection(app, request_line):
    with mock.patch.object(app, "locate_gophermap") as locate_gophermap:
        response, body = request(app, request_line)

    assert response.status == Status.PATH_INJECTION
    assert body is None
    locate_gophermap.assert_not_called()


def test_path_injection_through_symlink(app, root):
    outside = root.parent / "secret"
    outside.write_text("secret\n")
    (root / "secret").symlink_to(outside)
    with open(root / "gophermap", "a") as fp:
        fp.write("0Secret\t/secret\tlocalhost\t7071\n")

    response, _ = request(app, "/secret")
    assert response.status == Status.PATH_INJECTION


def test_gophermap_is_cached_by_canonical_path(app, root):
    real = root / "real"
    real.mkdir()
    (real / "gophermap").write_text(
        "0Real\t/real/file\tlocalhost\t7071\n0Alias\t/alias/file\tlocalhost\t7071\n"
    )
    (real / "file").write_text("file\n")
    (root / "alias").symlink_to(real, target_is_directory=True)

    with mock.patch.object(app.gophermaps, "load", wraps=app.gophermaps.load) as load:
        assert request(app, "/real/file")[0].status == Status.TEXT
        assert request(app, "/alias/file")[0].status == Status.TEXT
        assert request(app, "/real//./file")[0].status == Status.NO_ENTRY

    assert load.call_count == 1
    assert len(app.gophermaps.cache) == 1
    assert str(real / "gophermap") in app.gophermaps.cache


def test_classification_is_cached(app):
    request(app, "/bin")
    with mock.patch.object(app.gophermaps, "get") as get:
        response, body = request(app, "/bin")
        # The gophermap is still located, but it's never scanned again
        assert response.status == Status.BINARY
    assert get.call_count == 1
    assert app.classifier.cache.get("/bin") is True


def test_directory_gophermap_is_never_classified(app):
    with mock.patch.object(app.classifier, "is_binary") as is_binary:
        response, _ = request(app, "/")
    assert response.status == Status.TEXT
    is_binary.assert_not_called()


def test_request_context(app, root):
    captured = []
    serve = app.serve

    def spy(request):
        captured.append(request)
        return serve(request)

    with mock.patch.object(app, "serve", side_effect=spy):
        request(app, "/docs/readme")

    context = captured[0]
    assert context.request_line == "/docs/readme"
    assert context.selector == "/docs/readme"
    assert context.path == root / "docs" / "readme"
    assert context.path_kind == "file"
    assert context.gophermap == root / "docs" / "gophermap"


def test_strict_gophermaps(root):
    (root / "gophermap").write_text(GOPHERMAP + "0Broken\t/broken\n")
    app = StaticGopherApplication(
        root_directory=str(root), hosts=["localhost"], port=7071, strict_gophermaps=True
    )
    with pytest.raises(ValueError):
        app({"REQUEST_LINE": "/me_txt"})


def test_locate_gophermap_returns_canonical_path(app, root):
    context = RequestContext.from_request_line("/docs/../docs/readme")
    path = root / "docs" / ".." / "docs" / "readme"

    gophermap = app.locate_gophermap(context, path)
    assert gophermap == root / "docs" / "gophermap"
    assert context.gophermap == gophermap
    assert context.path_kind == "file"
