import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

class LogManager:
    def __init__(self, logs_dir: Optional[Union[str, Path]] = None,
                 log_to_console: bool = True, keep_log_files: int = 1):
        """Initialize logging system."""
        self.base_dir = self._get_base_dir()
        logs_dir = Path(logs_dir) if logs_dir else Path('logs')
        self.logs_dir = logs_dir if logs_dir.is_absolute() else self.base_dir / logs_dir
        self.log_to_console = log_to_console
        self.keep_log_files = max(1, keep_log_files)

        # Create logs directory if needed
        self.logs_dir.mkdir(parents=True, exist_ok=True)

        # Set up log filename with timestamp
        self.log_filename = self.logs_dir / f"cardreader_log_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.txt"

        self.start_new_log()
        self.cleanup_old_logs()

    @classmethod
    def from_settings(cls, settings_manager) -> "LogManager":
        return cls(
            logs_dir=settings_manager.get_setting('logs_directory'),
            log_to_console=settings_manager.get_setting('log_to_console', True),
            keep_log_files=settings_manager.get_setting('keep_log_files', 1),
        )

    def _get_base_dir(self) -> Path:
        """Get the base directory for logs based on whether running as exe or source."""
        if getattr(sys, 'frozen', False):
            return Path(sys.executable).parent
        else:
            return Path(__file__).parent.parent

    def log_info(self, message):
        """Log an info message."""
        self.log_step(f"INFO: {message}")

    def log_step(self, message, data=None):
        """Log a step with optional data."""
        try:
            timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
            log_message = f"[{timestamp}] {message}\n"

            if data is not None:
                if isinstance(data, (dict, list)):
                    formatted_data = json.dumps(data, indent=2, ensure_ascii=False)
                    log_message += f"Data:\n{formatted_data}\n"
                else:
                    log_message += f"Data: {str(data)}\n"

            with open(self.log_filename, 'a', encoding='utf-8') as f:
                f.write(log_message)
                f.write("\n")

            if self.log_to_console:
                print(log_message.strip())

        except OSError as e:
            print(f"Error writing to log: {e}")

    def log_warning(self, message):
        """Log a warning message."""
        self.log_step(f"WARNING: {message}")

    def log_error(self, message, error=None):
        """Log an error with optional exception details."""
        try:
            timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
            separator = "!" * 40

            error_message = f"\n{separator}\n"
            error_message += f"[{timestamp}] ERROR: {message}\n"
            if error:
                error_message += f"Exception: {str(error)}\n"
            error_message += f"{separator}\n"

            with open(self.log_filename, 'a', encoding='utf-8') as f:
                f.write(error_message)

            if self.log_to_console:
                print(error_message)

        except OSError as e:
            print(f"Error logging error: {e}")

    def start_new_log(self):
        """Initialize a new log file with header."""
        try:
            with open(self.log_filename, 'w', encoding='utf-8') as f:
                timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
                f.write(f"=== CardReader Log Started at {timestamp} ===\n\n")
        except OSError as e:
            print(f"Error creating log file: {e}")

    def cleanup_old_logs(self):
        """Delete all but the most recent keep_log_files log files."""
        try:
            log_files = sorted(self.logs_dir.glob("cardreader_log_*.txt"), reverse=True)

            # Timestamped names sort newest first
            for filepath in log_files[self.keep_log_files:]:
                if filepath == self.log_filename:
                    continue
                try:
                    filepath.unlink()
                except OSError as e:
                    print(f"Error deleting log file {filepath}: {e}")

        except OSError as e:
            print(f"Error during log cleanup: {e}")
