import os

import pytest

from changedpkgs.errors import GraphLoadError, GraphOrderError, OwnershipConflictError
from changedpkgs.graph import PackageGraph, attribute_file
from changedpkgs.models import LocalPackage


def test_attribute_file_finds_owner(make_package, repo_dir: str) -> None:
    pkgs = [
        make_package("lib", files=["lib/lib.go", "lib/lib.c", "lib/data/schema.json"]),
        make_package("app", files=["app/main.go"], imports=["lib"]),
    ]

    assert attribute_file("lib/lib.c", pkgs, repo_dir) == "lib"
    assert attribute_file("lib/data/schema.json", pkgs, repo_dir) == "lib"
    assert attribute_file("app/main.go", pkgs, repo_dir) == "app"


def test_attribute_file_is_idempotent(make_package, repo_dir: str) -> None:
    pkgs = [make_package("lib", files=["lib/lib.go"])]

    for path in ["lib/lib.go", "README.md", "lib/other.go"]:
        assert attribute_file(path, pkgs, repo_dir) == attribute_file(path, pkgs, repo_dir)


def test_unowned_file_has_no_owner(make_package, repo_dir: str) -> None:
    graph = PackageGraph(packages=[make_package("lib", files=["lib/lib.go"])])

    assert attribute_file("Makefile", graph, repo_dir) is None
    assert graph.owner_of("Makefile", repo_dir) is None
    # a sibling file that is not listed (e.g. a test file) is not owned either
    assert graph.owner_of("lib/lib_test.go", repo_dir) is None


def test_owner_of_matches_linear_attribution(make_package, repo_dir: str) -> None:
    graph = PackageGraph(
        packages=[
            make_package("a", files=["a/a.go", "a/embed.txt"]),
            make_package("b", files=["b/b.go"], imports=["a"]),
        ]
    )

    for path in ["a/a.go", "a/embed.txt", "b/b.go", "b/../a/a.go", "c/c.go"]:
        assert graph.owner_of(path, repo_dir) == attribute_file(path, graph, repo_dir)


def test_file_owned_twice_is_a_conflict(make_package) -> None:
    a = make_package("a", files=["shared/x.go"])
    b = make_package("b", files=["shared/x.go"])

    with pytest.raises(OwnershipConflictError) as excinfo:
        PackageGraph(packages=[a, b])

    assert excinfo.value.owners == ["a", "b"]
    assert excinfo.value.file.endswith(os.path.join("shared", "x.go"))


def test_dependency_after_importer_is_rejected(make_package) -> None:
    a = make_package("a", imports=["b"])
    b = make_package("b")

    with pytest.raises(GraphOrderError, match="a is listed before its dependency b"):
        PackageGraph(packages=[a, b])


def test_imports_outside_the_graph_are_ignored_by_order_check(make_package) -> None:
    graph = PackageGraph(packages=[make_package("a", imports=["fmt", "github.com/x/y"])])

    assert graph.paths == ["a"]


def test_duplicate_package_is_rejected(make_package) -> None:
    with pytest.raises(GraphLoadError):
        PackageGraph(packages=[make_package("a"), make_package("a")])


def test_from_unordered_sorts_dependencies_first(make_package) -> None:
    a = make_package("a", imports=["b", "c"])
    b = make_package("b", imports=["c"])
    c = make_package("c")
    d = make_package("d")

    graph = PackageGraph.from_unordered([a, b, d, c])

    assert graph.paths == ["d", "c", "b", "a"]


def test_from_unordered_rejects_cycles(make_package) -> None:
    a = make_package("a", imports=["b"])
    b = make_package("b", imports=["a"])
    c = make_package("c")

    with pytest.raises(GraphOrderError, match="a, b"):
        PackageGraph.from_unordered([a, b, c])


def test_graph_lookups(make_package) -> None:
    pkg = make_package("a")
    graph = PackageGraph(packages=[pkg])

    assert "a" in graph
    assert "b" not in graph
    assert graph.get("a") is pkg
    assert len(graph) == 1
    assert list(graph) == [pkg]


def test_local_package_owns_only_listed_files() -> None:
    pkg = LocalPackage(path="a", files=frozenset({"/r/a/a.go"}))

    assert pkg.owns("/r/a/a.go")
    assert not pkg.owns("/r/a/b.go")
