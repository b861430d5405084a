"""Exception log for Change Extractor.

Records failures with enough context to debug them after the fact:
- Timestamp and process ID-based log files under .change-extractor/
- Complete stack traces
- Thread information
- Command context (git commands, requested targets)
"""

import json
import os
import threading
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any

from ..config import CONFIG_DIR_NAME


class ExceptionLogger:
    """Writes exceptions with full context to a timestamped JSON log file."""

    _instance: Optional["ExceptionLogger"] = None

    def __init__(self, log_file_path: Path):
        self.log_file_path = log_file_path

    @classmethod
    def initialize(cls, project_root: Path) -> "ExceptionLogger":
        """Initialize the process-wide exception logger (idempotent singleton).

        The log file itself is only created when the first exception is
        written, so successful runs leave nothing behind.

        Tests should reset ``cls._instance = None`` to get a fresh instance.

        Args:
            project_root: Directory holding the .change-extractor/ folder

        Returns:
            The ExceptionLogger singleton
        """
        if cls._instance is not None:
            return cls._instance

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_dir = Path(project_root) / CONFIG_DIR_NAME
        log_file_path = log_dir / f"error_{timestamp}_{os.getpid()}.log"

        cls._instance = cls(log_file_path)
        return cls._instance

    @classmethod
    def get_instance(cls) -> Optional["ExceptionLogger"]:
        return cls._instance

    def log_exception(
        self,
        exception: Exception,
        thread_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append an exception entry to the log file.

        Args:
            exception: The exception to log
            thread_name: Name of the thread where exception occurred (optional)
            context: Additional context data to include in log (optional)
        """
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "thread": thread_name or threading.current_thread().name,
            "exception_type": type(exception).__name__,
            "exception_message": str(exception),
            "stack_trace": "".join(
                traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )
            ),
            "context": context or {},
        }

        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_file_path, "a") as f:
            f.write(json.dumps(log_entry, indent=2))
            f.write("\n---\n")

    def install_thread_exception_hook(self) -> None:
        """Capture uncaught exceptions in plain threads.

        Exceptions raised inside ThreadPoolExecutor workers, such as failed diff
        fetches, are delivered through their futures and re-raised by the caller.
        """

        def global_thread_exception_handler(args):
            self.log_exception(
                exception=args.exc_value,
                thread_name=args.thread.name if args.thread else None,
                context={"exc_type": args.exc_type.__name__},
            )

        threading.excepthook = global_thread_exception_handler
