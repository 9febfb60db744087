from __future__ import annotations

from pathlib import Path

from modpaths.resolvers import PythonPackageResolver, containing_root, relative_module_id


def test_regular_package_resolves_to_slash_separated_import_path(tmp_path: Path) -> None:
    package = tmp_path / "xml" / "etree"
    package.mkdir(parents=True)
    (package / "__init__.py").write_text("", encoding="utf-8")
    resolver = PythonPackageResolver([str(tmp_path)])

    resolution = resolver.resolve(str(package))

    assert resolution.module_id == "xml/etree"
    assert resolution.ok is True
    assert resolution.resolver == "python"


def test_directory_with_plain_modules_is_recognized(tmp_path: Path) -> None:
    (tmp_path / "ns").mkdir()
    (tmp_path / "ns" / "helpers.py").write_text("", encoding="utf-8")
    resolver = PythonPackageResolver([str(tmp_path)])

    assert resolver.resolve(str(tmp_path / "ns")).ok is True


def test_directory_without_modules_keeps_derived_identifier(tmp_path: Path) -> None:
    data = tmp_path / "pkg" / "data"
    data.mkdir(parents=True)
    (data / "table.csv").write_text("a,b\n", encoding="utf-8")
    (data / ".hidden.py").write_text("", encoding="utf-8")
    resolver = PythonPackageResolver([str(tmp_path)])

    resolution = resolver.resolve(str(data))

    assert resolution.module_id == "pkg/data"
    assert resolution.ok is False
    assert resolution.resolver is None


def test_subdirectory_named_like_module_does_not_count(tmp_path: Path) -> None:
    (tmp_path / "pkg" / "fake.py").mkdir(parents=True)
    resolver = PythonPackageResolver([str(tmp_path)])

    assert resolver.resolve(str(tmp_path / "pkg")).ok is False


def test_root_and_outside_directories_have_empty_identifier(tmp_path: Path) -> None:
    root = tmp_path / "root"
    outside = tmp_path / "outside"
    root.mkdir()
    outside.mkdir()
    (outside / "mod.py").write_text("", encoding="utf-8")
    resolver = PythonPackageResolver([str(root)])

    assert resolver.resolve(str(root)).module_id == ""
    outside_resolution = resolver.resolve(str(outside))
    assert outside_resolution.module_id == ""
    assert outside_resolution.ok is True


def test_nested_roots_use_longest_containing_root(tmp_path: Path) -> None:
    outer = tmp_path / "lib"
    inner = outer / "site-packages"
    target = inner / "requests"
    target.mkdir(parents=True)
    (target / "__init__.py").write_text("", encoding="utf-8")
    resolver = PythonPackageResolver([str(outer), str(inner)])

    assert resolver.resolve(str(target)).module_id == "requests"


def test_containing_root_requires_whole_segment_prefix(tmp_path: Path) -> None:
    root = str(tmp_path / "lib")
    sibling = str(tmp_path / "lib2" / "pkg")

    assert containing_root(sibling, (root,)) is None
    assert containing_root(root, (root,)) == root


def test_relative_module_id_uses_forward_slashes(tmp_path: Path) -> None:
    directory = tmp_path / "a" / "b" / "c"

    assert relative_module_id(str(directory), str(tmp_path)) == "a/b/c"
    assert relative_module_id(str(tmp_path), str(tmp_path)) == ""
