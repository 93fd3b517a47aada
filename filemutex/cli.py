#!/usr/bin/env python3

"""
Command-line interface for filemutex
"""

import sys
import logging
import argparse
import time
from tqdm import tqdm
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from filemutex.config import Config
from filemutex.core import MutexCounter
from filemutex.errors import FileMutexError
from filemutex.lock import RETRY_POLICIES

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

EXIT_BUSY = 2


class StressStats:
    def __init__(self, workers):
        self.workers = workers
        self.succeeded = 0
        self.failed = 0
        self.start_time = time.time()
        self.pbar = None

    def start_progress(self):
        """start worker progress"""
        self.pbar = tqdm(
            total=self.workers,
            desc="workers",
            unit="proc",
            bar_format="{desc:<20} |{bar:50}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}] {percentage:3.0f}%",
            colour="green",
            ncols=120,
            position=0,
            leave=True
        )

    def update_progress(self, status, index):
        """update progress bar and stats"""
        if status == 'done':
            self.succeeded += 1
            self.pbar.set_description(f"✓ worker {index}")
        elif status == 'fail':
            self.failed += 1
            self.pbar.set_description(f"× worker {index}")

        self.pbar.update(1)

    def close(self):
        if self.pbar is not None:
            self.pbar.close()

    def print_summary(self, final_value):
        """print summary"""
        self.close()
        elapsed_time = time.time() - self.start_time
        value_style = "green" if final_value == self.workers else "red"

        table = Table(box=box.ROUNDED, show_header=False, border_style="bright_blue")
        table.add_column("Item", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("workers", f"{self.workers:,}")
        table.add_row("succeeded", f"[green]✓ {self.succeeded:,}[/green]")
        table.add_row("failed", f"[red]× {self.failed:,}[/red]")
        table.add_row("final counter", f"[{value_style}]{final_value:,}[/{value_style}]")
        table.add_row("total time", f"{elapsed_time:.1f} seconds")

        panel = Panel(
            table,
            title="[bold cyan]stress run statistics[/bold cyan]",
            border_style="bright_blue",
            padding=(1, 2)
        )

        console.print("\n")
        console.print(panel)


def build_parser():
    parser = argparse.ArgumentParser(prog='filemutex', description='File lock mutex tool')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('counter', help='Counter file path')
    common.add_argument('--lock', help='Lock file path (default: <tmpdir>/mutex.lock)')
    common.add_argument('--retry-policy', choices=RETRY_POLICIES,
                        help='How to wait while the lock is busy')
    common.add_argument('--retry-interval', type=float,
                        help='Seconds between attempts for the backoff policy')
    common.add_argument('--config', help='Config file or directory holding .filemutex.yml')
    common.add_argument('--quiet', action='store_true',
                        help='Suppress wait notices and the printed counter value')

    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('increment', parents=[common],
                          help='Increment the counter, waiting for the lock')
    subparsers.add_parser('try', parents=[common],
                          help='Increment the counter only if the lock is free')
    stress = subparsers.add_parser('stress', parents=[common],
                                   help='Run worker processes that each increment once')
    stress.add_argument('--workers', type=int, default=100, help='Number of worker processes')
    return parser


def make_counter(args, progress_callback=None):
    # Load config from file
    file_config = Config.load_config(args.config)

    # Convert args to dict and merge with file config
    config = Config.validate(Config.merge_config(file_config, vars(args)))

    wait_callback = None
    if not args.quiet:
        wait_callback = lambda attempt: err_console.print("[yellow]Waiting for lock...[/yellow]")

    kwargs = {}
    if 'retry_policy' in config:
        kwargs['retry_policy'] = config['retry_policy']
    if 'retry_interval' in config:
        kwargs['retry_interval'] = float(config['retry_interval'])

    return MutexCounter(
        counter_path=args.counter,
        lock_path=config.get('lock_path'),
        progress_callback=progress_callback,
        wait_callback=wait_callback,
        **kwargs
    )


def run_stress(args):
    if args.workers < 1:
        logger.error("--workers must be at least 1")
        return 1

    stats = StressStats(args.workers)
    counter = make_counter(args, progress_callback=lambda status, index: stats.update_progress(status, index))
    try:
        counter.reset(0)
        stats.start_progress()
        counter.run_workers(args.workers)
    finally:
        stats.close()

    final_value = counter.value()
    stats.print_summary(final_value)
    return 0 if final_value == args.workers else 1


def main(argv=None):
    """main"""
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if args.command == 'stress':
            return run_stress(args)

        counter = make_counter(args)
        if args.command == 'try':
            value = counter.try_increment()
            if value is None:
                err_console.print("[bold yellow]lock is busy[/bold yellow]")
                return EXIT_BUSY
        else:
            value = counter.increment()
    except FileMutexError as e:
        err_console.print(f"[bold red]{args.command} failed: {str(e)}[/bold red]")
        return 1

    if not args.quiet:
        console.print(value)
    return 0


if __name__ == '__main__':
    sys.exit(main())
