#!/usr/bin/env python3
"""
twinsweep CLI: command line interface for duplicate file detection and removal.
By default removal moves files to the system trash; --delete erases them permanently.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import os
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, NoReturn

from twinsweep import __version__
from twinsweep.core.models import DeduplicationParams, DuplicateGroup
from twinsweep.core.assembler import GroupAssemblerImpl
from twinsweep.commands import DeduplicationCommand
from twinsweep.utils.convert_utils import ConvertUtils
from twinsweep.services.file_service import FileService, SystemTrash, DirectoryTrash
from twinsweep.services.duplicate_service import DuplicateService

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

EPILOG_TEXT = """
Examples:
  Find duplicates in the Downloads folder
  %(prog)s -i ~/Downloads

  Only consider files of at least 1MB, in several folders
  %(prog)s -i ~/Downloads ~/Documents -m 1MB

  Keep one file per group and move the rest to trash (with confirmation prompt)
  %(prog)s -i ~/Downloads --keep-one

  Same as above, without confirmation, trashing into a folder of your choice
  %(prog)s -i ~/Downloads --keep-one --force --trash-dir ~/dupes-trash
"""


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self._stop_event = threading.Event()

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="twinsweep",
            description="twinsweep: find byte-identical files and reclaim wasted space",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "--input", "-i",
            required=True,
            nargs="+",
            type=str,
            metavar='DIR',
            help="Directories to scan (each one is scanned on its own)"
        )
        parser.add_argument(
            "--min-size", "-m",
            default="0",
            type=str,
            metavar='',
            help="Minimum file size (e.g., 500KB, 1MB). Default: 0"
        )
        parser.add_argument(
            "--workers", "-w",
            default=None,
            type=int,
            metavar='',
            help="Hashing threads. Default: CPU count + 4 (max 32)"
        )

        # Actions
        parser.add_argument(
            "--keep-one",
            action="store_true",
            help="Keep the first file of every group and remove the rest.\n"
                 "Always shows a preview before removal."
        )
        parser.add_argument(
            "--delete",
            action="store_true",
            help="With --keep-one: delete permanently instead of moving to trash"
        )
        parser.add_argument(
            "--trash-dir",
            default=None,
            type=str,
            metavar='',
            help="With --keep-one: move files into this directory instead of the system trash"
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt when used with --keep-one (for automation/scripts)"
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show detailed statistics and progress"
        )
        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {__version__}"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.force and not args.keep_one:
            self.error_exit("--force can only be used with --keep-one")
        if args.delete and not args.keep_one:
            self.error_exit("--delete can only be used with --keep-one")
        if args.trash_dir and not args.keep_one:
            self.error_exit("--trash-dir can only be used with --keep-one")
        if args.delete and args.trash_dir:
            self.error_exit("--delete and --trash-dir cannot be combined")

        if args.keep_one and not args.force:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when piping output or running in scripts."
                )

        for directory in args.input:
            root_path = Path(directory).expanduser().resolve()
            if not root_path.exists():
                self.error_exit(f"Directory not found: {directory}")
            if not root_path.is_dir():
                self.error_exit(f"Path is not a directory: {directory}")

        if not ConvertUtils.is_valid_size_format(args.min_size):
            self.error_exit(f"Invalid size format: {args.min_size}")

        if args.workers is not None and args.workers < 1:
            self.error_exit("Worker count must be at least 1")

    def create_params(self, args: argparse.Namespace) -> List[DeduplicationParams]:
        """Create one DeduplicationParams per input directory."""
        try:
            return [
                DeduplicationParams.from_human_readable(
                    root_dir=str(Path(directory).expanduser().resolve()),
                    min_size_str=args.min_size,
                    workers=args.workers,
                )
                for directory in args.input
            ]
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(f"\r  [{stage}] {current}/{total} ({percent:.1f}%)")
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
        sys.stderr.flush()

    def stopped_flag(self) -> bool:
        """True once the user pressed Ctrl+C."""
        return self._stop_event.is_set()

    def _handle_sigint(self, signum, frame) -> None:
        if self._stop_event.is_set():
            raise KeyboardInterrupt
        self._stop_event.set()
        sys.stderr.write("\nStopping after the current files... (Ctrl+C again to abort)\n")

    def run_deduplication(self, params_list: List[DeduplicationParams],
                          excluded_dirs: Optional[List[str]] = None) -> List[DuplicateGroup]:
        """Scan every root and merge the results."""
        command = DeduplicationCommand()
        results = []

        for params in params_list:
            if not self.quiet:
                print(f"Scanning directory: {params.root_dir}")
            try:
                groups, stats = command.execute(
                    params,
                    progress_callback=self.progress_callback if self.verbose else None,
                    stopped_flag=self.stopped_flag,
                    excluded_dirs=excluded_dirs
                )
            except ValueError as e:
                self.error_exit(str(e))

            if self.verbose:
                sys.stderr.write("\n")
                print(stats.print_summary())

            if self.stopped_flag():
                print("Scan cancelled by user.", file=sys.stderr)
                sys.exit(130)
            results.append(groups)

        return GroupAssemblerImpl.merge(*results)

    def output_results(self, groups: List[DuplicateGroup]) -> None:
        """Output duplicate groups as plain text, largest waste first."""
        if self.quiet:
            return

        if not groups:
            print("No duplicate groups found.")
            return

        total_files = sum(g.duplicate_count for g in groups)
        wasted = ConvertUtils.bytes_to_human(DuplicateService.total_wasted(groups))
        print(f"\nFound {len(groups)} duplicate groups ({total_files} files, {wasted} reclaimable)")

        for idx, group in enumerate(groups, 1):
            print(
                f"\nGroup {idx} | Size: {ConvertUtils.bytes_to_human(group.file_size)} "
                f"| Files: {group.duplicate_count} "
                f"| Wasted: {ConvertUtils.bytes_to_human(group.total_wasted)} "
                f"| SHA-256: {group.hash[:16]}"
            )
            for file in group.files:
                print(f"   {file.path}")

    def execute_keep_one(self, groups: List[DuplicateGroup], args: argparse.Namespace) -> None:
        """Keep one file per group, remove the rest. Always shows preview before removal."""
        if not groups:
            if not self.quiet:
                print("No duplicate groups found.")
            return

        files_to_remove, _ = DuplicateService.keep_only_one_file_per_group(groups)
        space_saved_str = ConvertUtils.bytes_to_human(DuplicateService.total_wasted(groups))
        method = "permanently delete" if args.delete else "move to trash"

        print()
        for idx, group in enumerate(groups, 1):
            print(f"Group {idx} | Size: {ConvertUtils.bytes_to_human(group.file_size)} | Files: {group.duplicate_count}")
            print("-" * 60)
            print(f"   [KEEP] {group.files[0].path}")
            for file in group.files[1:]:
                print(f"   [DEL]  {file.path}")
            print()

        print("=" * 60)
        print(f"Summary: {len(groups)} files preserved, {len(files_to_remove)} files to {method}")
        print(f"Total space saved: {space_saved_str}")
        print()

        if args.force:
            print(f"WARNING: --force flag skips confirmation. Proceeding to {method}...")
        else:
            response = input(f"Are you sure you want to {method} {len(files_to_remove)} files? [y/N]: ")
            if response.strip().lower() not in ("y", "yes"):
                print("Operation cancelled by user.")
                return

        trash = DirectoryTrash(args.trash_dir) if args.trash_dir else SystemTrash()
        removed_count = 0
        failed_files = []

        for i, path in enumerate(files_to_remove, 1):
            if self.verbose:
                print(f"  [{i}/{len(files_to_remove)}] {os.path.basename(path)}")
            try:
                if args.delete:
                    FileService.delete(path)
                else:
                    FileService.move_to_trash(path, trash=trash)
                removed_count += 1
            except (RuntimeError, ValueError) as e:
                failed_files.append((path, str(e)))
                self.warning(f"Failed to remove {path}: {e}")

        if failed_files:
            print(f"\nPartial success: {removed_count}/{len(files_to_remove)} files removed.")
            for path, error in failed_files[:5]:
                print(f"  • {os.path.basename(path)}: {error.split(':')[-1].strip()}")
            if len(failed_files) > 5:
                print(f"  ...and {len(failed_files) - 5} more files")
        else:
            print(f"Successfully removed {removed_count} files.")
            print(f"Total space saved: {space_saved_str}")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"Warning: {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose:
            logging.getLogger("twinsweep").setLevel(logging.INFO)

        self.validate_args(args)
        params_list = self.create_params(args)

        excluded_dirs = [str(Path(args.trash_dir).expanduser().resolve())] if args.trash_dir else None

        previous_handler = None
        if threading.current_thread() is threading.main_thread():
            previous_handler = signal.signal(signal.SIGINT, self._handle_sigint)
        try:
            groups = self.run_deduplication(params_list, excluded_dirs=excluded_dirs)
        finally:
            if previous_handler is not None:
                signal.signal(signal.SIGINT, previous_handler)

        if args.keep_one:
            self.execute_keep_one(groups, args)
        else:
            self.output_results(groups)

        if self.verbose:
            print(f"\nCompleted in {time.time() - self.start_time:.2f} seconds")


def main(argv=None) -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run(argv)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
