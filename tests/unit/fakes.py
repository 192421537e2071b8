import subprocess
from typing import List, Optional

from cilium_demo.errors import CommandError
from cilium_demo.runner import CommandRunner


class FakeRunner(CommandRunner):
    """Record commands and answer them from prefix rules (latest rule wins)."""

    def __init__(self, tools: Optional[List[str]] = None) -> None:
        self.calls: List[List[str]] = []
        self.inputs: List[tuple] = []
        self.spawned: List[List[str]] = []
        self.slept: List[float] = []
        self._rules: List[tuple] = []
        self._tools = set(tools) if tools is not None else None

    def on(self, *prefix: str, stdout: str = "", returncode: int = 0, stderr: str = "") -> "FakeRunner":
        self._rules.insert(0, (list(prefix), returncode, stdout, stderr))
        return self

    def run(self, cmd, *, check=True, input=None, capture=True, cwd=None):
        cmd = list(cmd)
        self.calls.append(cmd)
        if input is not None:
            self.inputs.append((cmd, input))

        returncode, stdout, stderr = 0, "", ""
        for prefix, rc, out, err in self._rules:
            if cmd[: len(prefix)] == prefix:
                returncode, stdout, stderr = rc, out, err
                break

        if check and returncode != 0:
            raise CommandError(cmd, returncode, stderr)
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)

    def which(self, tool):
        if self._tools is None or tool in self._tools:
            return f"/usr/local/bin/{tool}"
        return None

    def spawn(self, cmd, log_path):
        self.spawned.append(list(cmd))
        return 4242

    def sleep(self, seconds):
        self.slept.append(seconds)

    def called(self, *prefix: str) -> List[List[str]]:
        return [cmd for cmd in self.calls if cmd[: len(prefix)] == list(prefix)]

    def index(self, *prefix: str) -> int:
        for position, cmd in enumerate(self.calls):
            if cmd[: len(prefix)] == list(prefix):
                return position
        raise AssertionError(f"{' '.join(prefix)} was never called")
