import pytest

from azurite.manifest import DependencySpec, ManifestError, parse_manifest

FULL = """
[package]
name = "my-project"
version = "0.1.0"

[dependencies]
string = { git = "https://github.com/azurite/string" }
math = { git = "https://github.com/azurite/math", rev = "v0.2.0" }
local = { path = "../my-lib" }
"""


def test_parse_full():
    m = parse_manifest(FULL)
    assert m.package.name == "my-project"
    assert m.package.version == "0.1.0"
    assert len(m.dependencies) == 3
    assert m.dependencies["string"].git == "https://github.com/azurite/string"
    assert m.dependencies["math"].rev == "v0.2.0"
    assert m.dependencies["local"].path == "../my-lib"


def test_dependencies_keep_file_order():
    m = parse_manifest(FULL)
    assert list(m.dependencies) == ["string", "math", "local"]


def test_parse_package_only():
    m = parse_manifest('\n[package]\nname = "test-proj"\nversion = "1.2.3"\n')
    assert m.package.name == "test-proj"
    assert m.package.version == "1.2.3"
    assert m.dependencies == {}


def test_parse_git_dep():
    m = parse_manifest(
        '[package]\nname = "x"\nversion = "0.1.0"\n\n[dependencies]\n'
        'foo = { git = "https://github.com/azurite/foo" }\n'
    )
    assert m.dependencies["foo"] == DependencySpec(git="https://github.com/azurite/foo")


def test_parse_git_dep_with_rev():
    m = parse_manifest(
        '[package]\nname = "x"\nversion = "0.1.0"\n\n[dependencies]\n'
        'bar = { git = "https://github.com/azurite/bar", rev = "v2.0.0" }\n'
    )
    dep = m.dependencies["bar"]
    assert dep.git == "https://github.com/azurite/bar"
    assert dep.rev == "v2.0.0"


def test_parse_path_dep():
    m = parse_manifest(
        '[package]\nname = "x"\nversion = "0.1.0"\n\n[dependencies]\n'
        'local = { path = "../my-lib" }\n'
    )
    dep = m.dependencies["local"]
    assert dep.path == "../my-lib"
    assert dep.git is None


def test_parse_multiple_deps():
    m = parse_manifest(
        '[package]\nname = "x"\nversion = "0.1.0"\n\n[dependencies]\n'
        'a = { git = "https://github.com/azurite/a" }\n'
        'b = { path = "./libs/b" }\n'
        'c = { git = "https://github.com/azurite/c", rev = "abc123" }\n'
    )
    assert len(m.dependencies) == 3
    assert m.dependencies["a"].git == "https://github.com/azurite/a"
    assert m.dependencies["b"].path == "./libs/b"
    assert m.dependencies["c"].rev == "abc123"


def test_parse_empty_manifest():
    m = parse_manifest('[package]\nname = ""\nversion = ""\n')
    assert m.package.name == ""
    assert m.package.version == ""
    assert m.dependencies == {}


def test_parse_with_comments():
    m = parse_manifest(
        "# This is a comment\n[package]\n"
        'name = "my-app"  # inline comment\nversion = "0.1.0"\n\n[dependencies]\n'
        '# string = { git = "https://github.com/azurite/string" }\n'
        'math = { git = "https://github.com/azurite/math" }\n'
    )
    assert m.package.name == "my-app"
    assert len(m.dependencies) == 1
    assert "math" in m.dependencies


def test_hash_inside_string_is_kept():
    m = parse_manifest('[package]\nname = "a#b"  # comment\n')
    assert m.package.name == "a#b"


def test_single_quoted_string():
    m = parse_manifest("[package]\nname = 'quoted'\n")
    assert m.package.name == "quoted"


def test_parse_invalid_unquoted_string():
    with pytest.raises(ManifestError):
        parse_manifest("[package]\nname = unquoted\n")


def test_invalid_dependency_value_raises():
    with pytest.raises(ManifestError):
        parse_manifest("[dependencies]\nfoo = { git = bare }\n")


def test_parse_dep_without_git_or_path():
    m = parse_manifest(
        '[package]\nname = "x"\nversion = "0.1.0"\n\n[dependencies]\nfoo = { rev = "abc" }\n'
    )
    dep = m.dependencies["foo"]
    assert dep.git is None
    assert dep.path is None
    assert dep.rev == "abc"


def test_non_table_dependency_is_ignored():
    m = parse_manifest('[dependencies]\nfoo = "1.0"\n')
    assert m.dependencies == {}


def test_unknown_sections_and_keys_ignored():
    m = parse_manifest('[other]\nname = unquoted\n[package]\nedition = "x"\nname = "n"\n')
    assert m.package.name == "n"
    assert m.package.version == ""