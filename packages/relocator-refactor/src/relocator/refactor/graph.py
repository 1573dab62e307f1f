import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Protocol, Sequence, Set

import networkx as nx

from relocator.workspace.project import Project
from .analysis import get_project_import_path
from .engine.syntax import iter_specifier_sites, may_contain_specifiers
from .engine.writer import WorkspaceWriter

log = logging.getLogger(__name__)


class DependencyEdge(NamedTuple):
    source: str
    target: str


class DependencyGraphProvider(Protocol):
    def fetch(self) -> List[DependencyEdge]: ...


def match_alias(specifier: str, aliases: Dict[str, str]) -> Optional[str]:
    """Project owning `specifier` when it is an alias or a deep import below one."""
    for alias, project_name in aliases.items():
        if specifier == alias or specifier.startswith(alias + "/"):
            return project_name
    return None


class WorkspaceGraphProvider:
    """
    Derives project -> project edges from the workspace itself.

    An edge A -> B exists when A lists B in `implicitDependencies` or when a
    source file of A imports B's alias.
    """

    def __init__(
        self,
        writer: WorkspaceWriter,
        projects: Dict[str, Project],
        tsconfig_files: Sequence[str] = (),
    ):
        self.writer = writer
        self.projects = projects
        self.tsconfig_files = tsconfig_files

    def _aliases(self) -> Dict[str, str]:
        aliases: Dict[str, str] = {}
        for name, project in self.projects.items():
            alias = get_project_import_path(self.writer, project, self.tsconfig_files)
            if alias:
                aliases[alias] = name
        return aliases

    def build_graph(self) -> nx.DiGraph:
        graph = nx.DiGraph()
        graph.add_nodes_from(self.projects)

        for name, project in self.projects.items():
            for dep in project.implicit_dependencies:
                if dep.startswith("!") or dep == name or dep not in self.projects:
                    continue
                graph.add_edge(name, dep)

        aliases = self._aliases()
        if not aliases:
            return graph

        for name, project in self.projects.items():
            for file_path in self.writer.project_source_files(project.root):
                content = self.writer.read(file_path)
                if not content or not may_contain_specifiers(content):
                    continue
                syntax = self.writer.syntax(file_path)
                if syntax is None:
                    continue
                for site in iter_specifier_sites(syntax):
                    target = match_alias(site.value, aliases)
                    if target and target != name:
                        graph.add_edge(name, target)
        return graph

    def fetch(self) -> List[DependencyEdge]:
        graph = self.build_graph()
        log.debug(f"Project graph: {graph.number_of_nodes()} projects, {graph.number_of_edges()} edges")
        return [DependencyEdge(source, target) for source, target in graph.edges]


def build_reverse_dependency_graph(edges: Iterable[DependencyEdge]) -> nx.DiGraph:
    """For every edge A -> B, records B -> A (B has dependent A)."""
    reverse = nx.DiGraph()
    for edge in edges:
        reverse.add_edge(edge.target, edge.source)
    return reverse


def get_dependent_project_names(reverse: nx.DiGraph, project_name: str) -> Set[str]:
    """Every project that depends on `project_name`, directly or transitively."""
    if project_name not in reverse:
        return set()
    return set(nx.bfs_tree(reverse, project_name).nodes) - {project_name}


class LazyProjectGraph:
    """Fetches the dependency graph on first use and never again."""

    def __init__(self, provider: DependencyGraphProvider):
        self._provider = provider
        self._reverse: Optional[nx.DiGraph] = None
        self._dependents: Dict[str, Set[str]] = {}
        self.fetch_count = 0

    @property
    def fetched(self) -> bool:
        return self._reverse is not None

    def reverse_graph(self) -> nx.DiGraph:
        if self._reverse is None:
            self._reverse = build_reverse_dependency_graph(self._provider.fetch())
            self.fetch_count += 1
        return self._reverse

    def dependents_of(self, project_name: str) -> Set[str]:
        if project_name not in self._dependents:
            self._dependents[project_name] = get_dependent_project_names(
                self.reverse_graph(), project_name
            )
        return self._dependents[project_name]
