#!/usr/bin/env python3
"""
Daily Game of Life run on a contribution calendar:
 1. Read last generation (commit dates in the working copy) and seed dates
 2. Build the date grid and step it
 3. Schedule one commit per live cell
 4. Rebuild the working copy history from those commits and push
"""
import argparse
import logging
import os
import sys

from data.observations import collect_observations
from data.repository import Repository, RepositoryError, authenticated_url
from utils.config import load_config
from utils.date_grid import MalformedDateError, build_grid, normalize_date, save_grid, today_utc
from utils.gol_simulator import simulate, step
from utils.metrics import detect_period, population, transition_counts
from utils.run_log import append_summary
from utils.scheduler import Identity, schedule_events


def stage(name):
    print(f"\n=== Stage: {name} ===")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Play one generation of Life on a contribution calendar")
    parser.add_argument('--config', type=str, default=None, help='YAML file laid over config/default.yaml')
    parser.add_argument('--anchor', type=str, default=None, help='anchor date YYYY-MM-DD (default: today, UTC)')
    parser.add_argument('--url', type=str, default=None, help='remote to clone and push to')
    parser.add_argument('--no_clone', action='store_true', help='use the working copy as it is instead of re-cloning')
    parser.add_argument('--local_path', type=str, default=None, help='working copy directory')
    parser.add_argument('--branch', type=str, default=None, help='branch the history is rebuilt on')
    parser.add_argument('--seed_file', type=str, default=None, help='file with extra seed dates, one per line')
    parser.add_argument('--generations', type=int, default=None, help='number of steps to advance')
    parser.add_argument('--strict_dates', action='store_true', help='fail on malformed dates instead of dropping them')
    parser.add_argument('--push', action='store_true', help='force push the rebuilt history')
    parser.add_argument('--dry_run', action='store_true', help='print the schedule without touching history')
    parser.add_argument('--save_grid', type=str, default=None, help='directory to write before.npy and after.npy')
    parser.add_argument('--output_csv', type=str, default=None, help='CSV file to append the run summary to')
    parser.add_argument('--log_level', type=str, default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser.parse_args(argv)


def apply_overrides(config, args):
    if args.url is not None:
        config.github.url = args.url
    if args.no_clone:
        config.github.clone = False
    if args.local_path is not None:
        config.github.local_path = args.local_path
    if args.branch is not None:
        config.github.branch = args.branch
    if args.seed_file is not None:
        config.grid.seed_file = args.seed_file
    if args.generations is not None:
        config.grid.generations = args.generations
    if args.strict_dates:
        config.grid.strict_dates = True
    config.grid.validate()
    return config


def run_pipeline(config, anchor, repo, push=False, dry_run=False, save_dir=None):
    """Run every stage and return the summary row for the run log."""
    gh, grid_cfg = config.github, config.grid

    stage('Read Observations')
    if gh.clone:
        repo.destroy()
        repo.clone(gh.remote_url())
    observations = collect_observations(repo.path, grid_cfg.seed_file, runner=repo.runner)
    print(f"Observations: {len(observations)}")

    stage('Step Generation')
    before = build_grid(observations, anchor, width=grid_cfg.width, strict=grid_cfg.strict_dates)
    after = before
    for _ in range(grid_cfg.generations):
        after = step(after)
    counts = transition_counts(before, after)
    period = detect_period(simulate(after, steps=2 * grid_cfg.width))
    print(f"Population: {population(before)} -> {population(after)} "
          f"(born {counts['born']}, died {counts['died']})")
    if save_dir:
        os.makedirs(save_dir, exist_ok=True)
        save_grid(before, os.path.join(save_dir, 'before.npy'))
        save_grid(after, os.path.join(save_dir, 'after.npy'))

    stage('Schedule Events')
    identity = Identity(config.commit.name, config.commit.email, config.commit.message)
    events = schedule_events(after, anchor, identity, width=grid_cfg.width)
    print(f"Events: {len(events)}")

    summary = {
        'anchor': anchor.isoformat(),
        'observations': len(observations),
        'population_before': population(before),
        'population_after': population(after),
        'period': period,
        'events': len(events),
        'pushed': False,
    }
    summary.update(counts)

    if dry_run:
        for e in events:
            print(f"{e.date.isoformat()}  ({e.column:2d}, {e.row})  {e.message}")
        return summary

    stage('Rebuild History')
    if not repo.exists():
        repo.init()
    repo.start_history(gh.branch)
    repo.replay(events)
    print(f"Replayed {len(events)} commit(s) onto {gh.branch}")

    if push:
        stage('Push')
        repo.push(gh.branch, remote=authenticated_url(gh.remote_url()))
        summary['pushed'] = True
    return summary


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    config = apply_overrides(load_config(args.config), args)
    repo = Repository(config.github.local_path)
    try:
        anchor = normalize_date(args.anchor) if args.anchor else today_utc()
        print(f"Anchor: {anchor.isoformat()}")
        summary = run_pipeline(config, anchor, repo, push=args.push,
                               dry_run=args.dry_run, save_dir=args.save_grid)
    except RepositoryError as exc:
        print(f"git failed: {exc}", file=sys.stderr)
        return 1
    except MalformedDateError as exc:
        print(f"bad date: {exc}", file=sys.stderr)
        return 2

    if args.output_csv:
        append_summary(args.output_csv, summary)
        print(f"Results appended to {args.output_csv}")
    print("\nRun completed successfully.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
