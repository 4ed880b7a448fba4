"""
Sources of dated observations for the grid: commit dates already in the
working copy (the previous generation) and an optional seed file.
"""
import logging
import os
import subprocess

from data.repository import RepositoryError

logger = logging.getLogger(__name__)


def read_commit_dates(repo_path, runner=subprocess.run):
    """Author dates (ISO 8601 strings) of every commit reachable from HEAD."""
    if not os.path.isdir(os.path.join(repo_path, '.git')):
        logger.info("no working copy at %s, starting from an empty history", repo_path)
        return []
    head = runner(['git', 'rev-parse', '--verify', '--quiet', 'HEAD'],
                  cwd=repo_path, capture_output=True, text=True)
    if head.returncode != 0:
        # freshly initialised repository with no commits yet
        return []
    cmd = ['git', 'log', '--format=%aI', 'HEAD']
    proc = runner(cmd, cwd=repo_path, capture_output=True, text=True)
    if proc.returncode != 0:
        raise RepositoryError(cmd, proc.returncode, proc.stderr or '')
    return [line for line in proc.stdout.splitlines() if line.strip()]


def read_seed_dates(path):
    """One date per line; blank lines and '#' comments are skipped."""
    if path is None or not os.path.isfile(path):
        return []
    dates = []
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.split('#', 1)[0].strip()
            if line:
                dates.append(line)
    return dates


def collect_observations(repo_path, seed_path=None, runner=subprocess.run):
    """History and seeds together; both feed the same grid before stepping."""
    history = read_commit_dates(repo_path, runner=runner)
    seeds = read_seed_dates(seed_path)
    logger.debug("%d commit date(s), %d seed date(s)", len(history), len(seeds))
    return history + seeds
