from typing import List, Optional


class ToolTimeoutError(RuntimeError):
    """
    Raised when an external tool (ffmpeg/ffprobe) did not finish in time.
    The child process has already been killed when this is raised.
    """

    def __init__(self, command: List[str], timeout: Optional[float]):
        self.command = command
        self.timeout = timeout
        super().__init__(f"{command[0]} timed out after {timeout}s")
