from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ProjectType(str, Enum):
    LIBRARY = "library"
    APPLICATION = "application"


@dataclass(frozen=True)
class Project:
    name: str
    root: str
    source_root: Optional[str] = None
    project_type: ProjectType = ProjectType.LIBRARY
    implicit_dependencies: Tuple[str, ...] = ()

    @property
    def effective_source_root(self) -> str:
        """The source root, falling back to the project root."""
        return self.source_root or self.root

    @property
    def base_dir(self) -> str:
        """Conventional subdirectory that holds the project's modules."""
        return "app" if self.project_type is ProjectType.APPLICATION else "lib"
