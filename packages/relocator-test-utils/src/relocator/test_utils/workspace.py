import json
from pathlib import Path
from textwrap import dedent
from typing import Any, Dict, List, Optional, Sequence, Union

import tomli_w


class WorkspaceFactory:
    """Declarative builder for throwaway Nx-style workspaces on disk."""

    def __init__(self, root_path: Path):
        self.root_path = root_path
        self._files_to_create: List[Dict[str, Any]] = []
        self._aliases: Dict[str, List[str]] = {}
        self._config: Dict[str, Any] = {}

    def with_config(self, relocator_config: Dict[str, Any]) -> "WorkspaceFactory":
        self._config.update(relocator_config)
        return self

    def with_project(
        self,
        name: str,
        root: str,
        source_root: Optional[str] = None,
        project_type: str = "library",
        implicit_dependencies: Sequence[str] = (),
    ) -> "WorkspaceFactory":
        data: Dict[str, Any] = {"name": name, "projectType": project_type}
        if source_root:
            data["sourceRoot"] = source_root
        if implicit_dependencies:
            data["implicitDependencies"] = list(implicit_dependencies)
        self._files_to_create.append(
            {"path": f"{root}/project.json", "content": data, "format": "json"}
        )
        return self

    def with_library(
        self,
        name: str,
        alias: Optional[str] = None,
        root: Optional[str] = None,
        index: Optional[str] = "",
        implicit_dependencies: Sequence[str] = (),
    ) -> "WorkspaceFactory":
        """A library at `packages/<name>` with `src/index.ts` and an optional alias."""
        root = root or f"packages/{name}"
        self.with_project(
            name, root, f"{root}/src", implicit_dependencies=implicit_dependencies
        )
        if index is not None:
            self.with_source(f"{root}/src/index.ts", index)
        if alias:
            self.with_alias(alias, f"{root}/src/index.ts")
        return self

    def with_application(
        self, name: str, root: Optional[str] = None, implicit_dependencies: Sequence[str] = ()
    ) -> "WorkspaceFactory":
        root = root or f"apps/{name}"
        return self.with_project(
            name, root, f"{root}/src", "application", implicit_dependencies
        )

    def with_alias(self, alias: str, target: Union[str, List[str]]) -> "WorkspaceFactory":
        self._aliases[alias] = [target] if isinstance(target, str) else list(target)
        return self

    def with_source(self, path: str, content: str) -> "WorkspaceFactory":
        self._files_to_create.append(
            {"path": path, "content": dedent(content).lstrip("\n"), "format": "raw"}
        )
        return self

    def build(self) -> Path:
        files = list(self._files_to_create)
        files.append({"path": "nx.json", "content": {}, "format": "json"})
        if self._aliases:
            files.append(
                {
                    "path": "tsconfig.base.json",
                    "content": {"compilerOptions": {"paths": self._aliases}},
                    "format": "json",
                }
            )
        if self._config:
            files.append(
                {"path": "relocator.toml", "content": self._config, "format": "toml"}
            )

        for file_spec in files:
            output_path = self.root_path / file_spec["path"]
            output_path.parent.mkdir(parents=True, exist_ok=True)

            content = file_spec["content"]
            fmt = file_spec["format"]
            if fmt == "toml":
                with output_path.open("wb") as f:
                    tomli_w.dump(content, f)
            elif fmt == "json":
                output_path.write_text(json.dumps(content, indent=2) + "\n", encoding="utf-8")
            else:
                output_path.write_text(content, encoding="utf-8")

        return self.root_path
