import json
import logging
import posixpath
from pathlib import Path
from typing import Dict, Optional

from .project import Project, ProjectType
from .tree import Tree

log = logging.getLogger(__name__)

PROJECT_FILE = "project.json"


class Workspace:
    """Nx-style project map read from every `project.json` visible in the tree."""

    def __init__(self, tree: Tree):
        self.tree = tree
        self.projects: Dict[str, Project] = {}
        self._discover_projects()

    @property
    def root_path(self) -> Path:
        return self.tree.root

    def _discover_projects(self) -> None:
        for path in self.tree.all_files():
            if posixpath.basename(path) != PROJECT_FILE:
                continue
            try:
                project = self._load_project(path)
            except (ValueError, TypeError) as e:
                log.warning(f"Could not process {path}: {e}")
                continue
            if project.name in self.projects:
                log.warning(
                    f"Duplicate project name '{project.name}' in {path}, keeping "
                    f"{self.projects[project.name].root or '.'}"
                )
                continue
            self.projects[project.name] = project

    def _load_project(self, path: str) -> Project:
        data = json.loads(self.tree.read(path) or "{}")
        if not isinstance(data, dict):
            raise ValueError("project.json must contain an object")

        root = posixpath.dirname(path)
        name = data.get("name") or posixpath.basename(root) or "root"
        try:
            project_type = ProjectType(data.get("projectType", "library"))
        except ValueError:
            project_type = ProjectType.LIBRARY

        source_root = data.get("sourceRoot")
        return Project(
            name=name,
            root=root,
            source_root=source_root.rstrip("/") if source_root else None,
            project_type=project_type,
            implicit_dependencies=tuple(data.get("implicitDependencies", [])),
        )

    def get_project(self, name: str) -> Optional[Project]:
        return self.projects.get(name)
