class WorkspaceError(Exception):
    pass


class WorkspaceNotFoundError(WorkspaceError):
    def __init__(self, start_path: str):
        self.start_path = start_path
        super().__init__(
            f"Could not locate a workspace root above '{start_path}'. "
            "Make sure this directory or one of its parents contains nx.json or .git."
        )
