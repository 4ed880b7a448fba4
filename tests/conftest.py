import os
import subprocess
import sys

import pytest

# repository root on sys.path for sibling imports (utils/, data/)
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir)))


class FakeGit:
    """Stands in for subprocess.run: records git calls and answers from a table."""

    def __init__(self, responses=None):
        self.calls = []
        self.responses = responses or {}

    def __call__(self, cmd, cwd=None, env=None, capture_output=False, text=False):
        self.calls.append({'cmd': list(cmd), 'cwd': cwd, 'env': env})
        returncode, stdout, stderr = self.responses.get(cmd[1], (0, '', ''))
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)

    def commands(self):
        return [c['cmd'][1] for c in self.calls]


@pytest.fixture
def fake_git():
    return FakeGit()
