"""Exceptions raised while reconstructing test intervals."""


class OrphanedFinishError(RuntimeError):
    """A test finished in the log without ever having been started.

    Only raised when the reconstruction runs in strict mode.
    """

    def __init__(self, test_name: str):
        self.test_name = test_name
        super().__init__(f'Saw end of "{test_name}" without start indicator')
