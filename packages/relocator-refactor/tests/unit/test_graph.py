from unittest.mock import Mock

from relocator.refactor.graph import (
    DependencyEdge,
    LazyProjectGraph,
    WorkspaceGraphProvider,
    build_reverse_dependency_graph,
    get_dependent_project_names,
    match_alias,
)
from relocator.test_utils import load_workspace, make_writer


def test_dependents_of_a_chain_are_transitive():
    # A -> B -> C -> D
    reverse = build_reverse_dependency_graph(
        [DependencyEdge("A", "B"), DependencyEdge("B", "C"), DependencyEdge("C", "D")]
    )

    assert get_dependent_project_names(reverse, "D") == {"A", "B", "C"}
    assert get_dependent_project_names(reverse, "B") == {"A"}
    assert get_dependent_project_names(reverse, "A") == set()
    assert get_dependent_project_names(reverse, "unknown") == set()


def test_dependents_survive_cycles():
    reverse = build_reverse_dependency_graph(
        [DependencyEdge("A", "B"), DependencyEdge("B", "A"), DependencyEdge("C", "A")]
    )

    assert get_dependent_project_names(reverse, "A") == {"B", "C"}


def test_lazy_graph_fetches_at_most_once():
    provider = Mock()
    provider.fetch.return_value = [DependencyEdge("app", "lib")]
    graph = LazyProjectGraph(provider)
    assert not graph.fetched

    assert graph.dependents_of("lib") == {"app"}
    assert graph.dependents_of("app") == set()
    assert graph.dependents_of("lib") == {"app"}

    assert graph.fetched
    provider.fetch.assert_called_once_with()
    assert graph.fetch_count == 1


def test_match_alias():
    aliases = {"@test/lib1": "lib1", "@test/lib": "lib"}

    assert match_alias("@test/lib1", aliases) == "lib1"
    assert match_alias("@test/lib1/deep/path", aliases) == "lib1"
    assert match_alias("@test/lib", aliases) == "lib"
    assert match_alias("@test/lib10", aliases) is None
    assert match_alias("./relative", aliases) is None


def test_workspace_provider_reads_imports_and_implicit_dependencies(workspace_factory, tmp_path):
    # Arrange
    workspace_factory.with_library("lib1", alias="@test/lib1").with_library(
        "lib2", alias="@test/lib2", implicit_dependencies=["!lib1"]
    ).with_application("app1").with_application(
        "app2", implicit_dependencies=["lib2", "missing"]
    ).with_source(
        "apps/app1/src/main.ts", "import { x } from '@test/lib1';\nimport('@test/lib1/deep');\n"
    ).build()
    _, workspace = load_workspace(tmp_path)
    provider = WorkspaceGraphProvider(make_writer(tmp_path), workspace.projects)

    # Act
    edges = set(provider.fetch())

    # Assert
    assert edges == {DependencyEdge("app1", "lib1"), DependencyEdge("app2", "lib2")}
