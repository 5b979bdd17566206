"""
Watch mode: re-run the whole conversion in a fresh process when a CSV changes.

Only one conversion runs at a time. A change seen while a run is in progress
is dropped rather than queued, and the next change after the run's process
exits starts a new run.
"""
import logging
import os
import subprocess
import sys
import threading
import time
from typing import Callable, List, Optional, Sequence

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from csv_i18n.csv_discovery import is_csv_path

logger = logging.getLogger(__name__)

# Opened/closed events are ignored, otherwise the conversion reading the CSVs would trigger itself.
WATCHED_EVENT_TYPES = frozenset({'created', 'modified', 'deleted', 'moved'})
WATCH_FLAGS = frozenset({'-w', '--watch', '--no-watch'})


def conversion_command(argv: Sequence[str]) -> List[str]:
    """The command line of a one-shot conversion with the same arguments, watch mode turned off."""
    args = [arg for arg in argv if arg not in WATCH_FLAGS]
    return [sys.executable, '-m', 'csv_i18n', *args, '--no-watch']


def _event_paths(event: FileSystemEvent) -> List[str]:
    paths = [os.fsdecode(event.src_path)]
    dest_path = getattr(event, 'dest_path', None)
    if dest_path:
        paths.append(os.fsdecode(dest_path))
    return paths


class CsvChangeHandler(FileSystemEventHandler):
    """
    Starts a conversion process for every qualifying CSV change while idle.

    Args:
        command: The conversion command line.
        popen: Factory for the child process, replaceable in tests.
    """

    def __init__(self, command: List[str], popen: Callable[..., subprocess.Popen] = subprocess.Popen):
        super().__init__()
        self.command = command
        self._popen = popen
        self._lock = threading.Lock()
        self._running = False
        self._waiter: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def is_relevant(self, event: FileSystemEvent) -> bool:
        if event.is_directory or event.event_type not in WATCHED_EVENT_TYPES:
            return False
        return any(is_csv_path(path) for path in _event_paths(event))

    def on_any_event(self, event: FileSystemEvent):
        if not self.is_relevant(event):
            return
        changed = os.path.basename(_event_paths(event)[-1])

        with self._lock:
            if self._running:
                logger.info(f"Skipping event for {changed} as a process is already running.")
                return
            self._running = True

        logger.info(f"[{event.event_type}] Detected change in: {changed}. Triggering conversion...")
        try:
            child = self._popen(self.command)
        except OSError as spawn_exc:
            logger.error(f"Failed to start conversion process: {spawn_exc}")
            self._finish()
            return

        self._waiter = threading.Thread(target=self._wait_for, args=(child,), daemon=True)
        self._waiter.start()

    def _wait_for(self, child: subprocess.Popen):
        try:
            code = child.wait()
            logger.info(f"Conversion process finished with code {code}. Ready for next change.")
        finally:
            self._finish()

    def _finish(self):
        with self._lock:
            self._running = False

    def join(self, timeout: Optional[float] = None):
        """Wait for the waiter thread of the current run, if any."""
        if self._waiter is not None:
            self._waiter.join(timeout)


def watch_input_directory(input_dir: str, argv: Sequence[str], observer_factory=Observer,
                          poll_interval: float = 1.0) -> int:
    """
    Watch a directory tree until interrupted.

    Args:
        input_dir: The directory holding the CSV files.
        argv: The arguments the tool was started with; the watch flag is removed
            before they are handed to each conversion process.
        observer_factory: watchdog observer class.
        poll_interval: Seconds between liveness checks of the observer.

    Returns:
        int: 0 after Ctrl+C, 1 if the watcher could not be started.
    """
    handler = CsvChangeHandler(conversion_command(argv))
    observer = observer_factory()
    try:
        observer.schedule(handler, input_dir, recursive=True)
        observer.start()
    except OSError as watch_exc:
        logger.error(f"Error starting watcher on {input_dir}: {watch_exc}")
        logger.error("Please ensure the input directory exists and you have permissions.")
        return 1

    logger.info(f"Watching for file changes in {input_dir}... (Press Ctrl+C to stop)")
    try:
        while observer.is_alive():
            time.sleep(poll_interval)
    except KeyboardInterrupt:
        logger.info("Stopping watcher.")
    finally:
        observer.stop()
        observer.join()
    return 0
