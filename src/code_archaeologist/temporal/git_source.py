"""Read-only async access to a git repository via subprocess."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Union

from ..exceptions import QueryFailed, SourceUnavailable
from ..logging_config import get_logger
from .models import CommitRecord
from .parsers import LOG_FORMAT, parse_log, parse_name_only

logger = get_logger(__name__)

_NOT_A_REPO_MARKERS = ("not a git repository", "cannot change to")

DEFAULT_MAX_CONCURRENT = 16


class GitSource:
    """Issue log/diff/blame/ls-files queries against one repository.

    Every query is an independent coroutine, so callers may run several
    concurrently. At most ``max_concurrent`` git processes are alive at once;
    further queries wait for a free slot. Nothing here mutates repository
    state.
    """

    def __init__(
        self,
        repo_path: Union[str, Path] = ".",
        git_binary: str = "git",
        timeout: Optional[float] = None,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    ):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.repo_path = str(Path(repo_path).resolve())
        self.git_binary = git_binary
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        # Created on first use so it binds to the loop that runs the queries
        self._slots: Optional[asyncio.Semaphore] = None

    async def run(self, *args: str) -> str:
        """Run ``git <args>`` in the repository and return stdout.

        Raises:
            SourceUnavailable: git is missing or the directory is not a repository
            QueryFailed: git could not be started, exited non-zero for any
                other reason, or timed out
        """
        if self._slots is None:
            self._slots = asyncio.Semaphore(self.max_concurrent)
        async with self._slots:
            return await self._run(args)

    async def _run(self, args: tuple[str, ...]) -> str:
        logger.debug("git %s", " ".join(args))
        try:
            proc = await asyncio.create_subprocess_exec(
                self.git_binary,
                "-C",
                self.repo_path,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise SourceUnavailable(self.repo_path, f"git executable not found: {e}")
        except OSError as e:
            raise QueryFailed(args, f"could not start git: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise QueryFailed(args, f"timed out after {self.timeout}s")

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            if any(marker in message.lower() for marker in _NOT_A_REPO_MARKERS):
                raise SourceUnavailable(self.repo_path, message)
            raise QueryFailed(args, message, proc.returncode)

        return stdout.decode("utf-8", errors="replace")

    async def ensure_repository(self) -> None:
        """Raise SourceUnavailable unless the path is inside a git work tree."""
        try:
            await self.run("rev-parse", "--is-inside-work-tree")
        except QueryFailed as e:
            raise SourceUnavailable(self.repo_path, e.reason)

    async def is_tracked(self, path: str) -> bool:
        """True when ``path`` is known to the index."""
        try:
            await self.run("ls-files", "--error-unmatch", "--", path)
        except QueryFailed:
            return False
        return True

    async def require_tracked(self, path: str) -> None:
        await self.ensure_repository()
        if not await self.is_tracked(path):
            raise SourceUnavailable(path, "file is not tracked by git")

    async def log(
        self,
        path: Optional[str] = None,
        max_count: Optional[int] = None,
        since: Optional[str] = None,
        diff_filter: Optional[str] = None,
    ) -> list[CommitRecord]:
        """Commits newest first, optionally scoped to a path.

        An empty list means no matching commits; it is never used to signal
        an error.
        """
        args = ["log", f"--format={LOG_FORMAT}"]
        if max_count is not None:
            args.append(f"--max-count={max_count}")
        if since:
            args.append(f"--since={since}")
        if diff_filter:
            args.append(f"--diff-filter={diff_filter}")
        if path is not None:
            args.extend(["--", path])

        try:
            raw = await self.run(*args)
        except QueryFailed as e:
            # An unborn HEAD (no commits yet) is an empty history
            if "does not have any commits" in e.reason:
                return []
            raise
        return parse_log(raw)

    async def diff(
        self,
        base: str,
        target: str,
        path: Optional[str] = None,
        name_only: bool = False,
    ) -> str:
        args = ["diff"]
        if name_only:
            args.append("--name-only")
        args.extend([base, target])
        if path is not None:
            args.extend(["--", path])
        return await self.run(*args)

    async def changed_files(self, commit_hash: str) -> list[str]:
        """Files changed by a commit relative to its first parent.

        Raises QueryFailed for a root commit (no ``<hash>~1``).
        """
        raw = await self.diff(f"{commit_hash}~1", commit_hash, name_only=True)
        return parse_name_only(raw)

    async def blame(self, path: str, start_line: int, end_line: int) -> str:
        return await self.run(
            "blame", "-L", f"{start_line},{end_line}", "--line-porcelain", "--", path
        )
