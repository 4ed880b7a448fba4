"""
Working copy that the scheduled events are replayed into.

Thin wrapper around the git executable: destroy and recreate the working
copy, rebuild history from scratch as a linear chain of backdated empty
commits, force push.
"""
import logging
import os
import shutil
import subprocess
from urllib.parse import quote, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

USERNAME_ENV = 'MAKER_OF_LIFE_USERNAME'
TOKEN_ENV = 'MAKER_OF_LIFE_TOKEN'


class RepositoryError(RuntimeError):
    """A git command failed."""

    def __init__(self, cmd, returncode, stderr):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"{' '.join(self.cmd)} exited with {returncode}: {stderr.strip()}")


def authenticated_url(url, env=None):
    """Embed credentials from the environment into an https remote URL."""
    env = os.environ if env is None else env
    token = env.get(TOKEN_ENV)
    parts = urlsplit(url)
    if not token or parts.scheme != 'https':
        return url
    username = env.get(USERNAME_ENV, 'x-access-token')
    netloc = f"{quote(username, safe='')}:{quote(token, safe='')}@{parts.hostname}"
    if parts.port:
        netloc += f":{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class Repository:
    def __init__(self, path, runner=subprocess.run):
        self.path = path
        self.runner = runner

    def _run(self, args, env=None, check=True, cwd=None):
        cmd = ['git'] + list(args)
        logger.debug("running %s", ' '.join(cmd))
        proc = self.runner(cmd, cwd=cwd or self.path, env=env,
                           capture_output=True, text=True)
        if check and proc.returncode != 0:
            raise RepositoryError(cmd, proc.returncode, proc.stderr or '')
        return proc

    def exists(self):
        return os.path.isdir(os.path.join(self.path, '.git'))

    def destroy(self):
        if os.path.exists(self.path):
            shutil.rmtree(self.path)

    def clone(self, url):
        parent = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(parent, exist_ok=True)
        self._run(['clone', '--quiet', url, os.path.abspath(self.path)], cwd=parent)

    def init(self):
        os.makedirs(self.path, exist_ok=True)
        self._run(['init', '--quiet'])

    def start_history(self, branch):
        """Point HEAD at an unborn `branch` with an empty index, dropping its old history."""
        self._run(['symbolic-ref', 'HEAD', f'refs/heads/{branch}'])
        self._run(['update-ref', '-d', f'refs/heads/{branch}'], check=False)
        self._run(['rm', '-r', '-q', '--cached', '--ignore-unmatch', '.'])

    def replay(self, events):
        """Create one empty commit per event, in order, each on top of the last."""
        for event in events:
            stamp = event.timestamp.isoformat()
            env = dict(os.environ)
            env.update({
                'GIT_AUTHOR_NAME': event.author_name,
                'GIT_AUTHOR_EMAIL': event.author_email,
                'GIT_AUTHOR_DATE': stamp,
                'GIT_COMMITTER_NAME': event.author_name,
                'GIT_COMMITTER_EMAIL': event.author_email,
                'GIT_COMMITTER_DATE': stamp,
            })
            self._run(['commit', '--allow-empty', '--quiet', '-m', event.message], env=env)
        return len(events)

    def push(self, branch, remote='origin', force=True):
        args = ['push', '--quiet']
        if force:
            args.append('--force')
        self._run(args + [remote, f'{branch}:{branch}'])
