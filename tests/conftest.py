"""
Shared fixtures.
"""
import subprocess
import pytest
from pdc.RUNNERS.docker_runner import DockerError, DockerRunner


class FakeDockerRunner(DockerRunner):
    """
    Records docker invocations instead of running them.
    """
    def __init__(self, attach_code=0, responses=None):
        super().__init__()
        self.attach_code = attach_code
        self.responses = responses or {}
        self.calls = []

    def attach(self, args):
        self.calls.append(list(args))
        return self.attach_code

    def capture(self, args, check=True):
        self.calls.append(list(args))
        returncode, stdout, stderr = self.responses.get(tuple(args), (0, "", ""))
        if check and returncode != 0:
            raise DockerError(self.command(*args), returncode, stderr)
        return subprocess.CompletedProcess(args, returncode, stdout, stderr)


@pytest.fixture
def fake_runner():
    return FakeDockerRunner()


@pytest.fixture
def make_runner():
    return FakeDockerRunner
