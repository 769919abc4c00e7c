"""Git tag history reader."""

from pathlib import Path
from typing import Optional

from ..exceptions import ConfigError, HistoryReadError, ProcessTimeoutError
from .process import run_command

# One line per tagged commit, newest first: "<author unix time>  (<refs>)"
LOG_FORMAT = "format:%at %d"


class GitHistoryReader:
    """Reads decorated tag history from a local git checkout."""

    def __init__(
        self,
        repository_path: str,
        timeout: Optional[float] = None,
        git_binary: str = "git",
    ) -> None:
        """Initialize the history reader.

        Args:
            repository_path: Path to the local checkout
            timeout: Per-query timeout in seconds
            git_binary: git executable to run

        Raises:
            ConfigError: If the path is not a directory
        """
        self.repository_path = Path(repository_path).expanduser()
        if not self.repository_path.is_dir():
            raise ConfigError(f"{repository_path} is not a directory!")
        self.timeout = timeout
        self.git_binary = git_binary

    def _log_command(self) -> list[str]:
        return [
            self.git_binary,
            "-C",
            str(self.repository_path),
            "log",
            "--tags",
            "--simplify-by-decoration",
            f"--pretty={LOG_FORMAT}",
        ]

    async def query_log(self, pattern: str, newest_only: bool = False) -> str:
        """Query tagged commits whose log line contains a substring.

        Args:
            pattern: Substring to filter lines by (digest or series prefix)
            newest_only: Keep only the most recent matching line

        Returns:
            Matching lines, newest first, joined by newlines (empty if none)

        Raises:
            HistoryReadError: If git fails or times out
        """
        try:
            result = await run_command(self._log_command(), timeout=self.timeout)
        except (OSError, ProcessTimeoutError) as e:
            raise HistoryReadError(f"Failed to read git history: {e}") from e

        if result.returncode != 0:
            raise HistoryReadError(
                f"git log exited with code {result.returncode}: "
                f"{result.stderr.strip()}"
            )

        lines = [line for line in result.stdout.splitlines() if pattern in line]
        if newest_only:
            lines = lines[:1]
        return "\n".join(lines)
