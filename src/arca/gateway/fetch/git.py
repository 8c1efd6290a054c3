"""Content fetching from remote git repositories using the git CLI."""

import logging
import tempfile
from pathlib import Path

from arca.errors import PathNotFoundError, SourceUnreachableError
from arca.gateway.fetch.abc import ContentFetcher
from arca.gateway.fetch.auth import CredentialProvider, git_auth_env
from arca.gateway.fetch.local import copy_directory_contents, resolve_inside
from arca.gateway.fetch.types import FetchedFile
from arca.models import Source
from arca.subprocess_utils import copied_env_for_git_subprocess, run_subprocess_with_context

logger = logging.getLogger(__name__)

# Timeout in seconds for network-touching git operations.
# Prevents indefinite hangs on network issues or credential prompts.
GIT_NETWORK_TIMEOUT = 120.0


class GitContentFetcher(ContentFetcher):
    """Fetches content with a shallow (depth 1) fetch into a scratch repository.

    Each call fetches the requested revision into a fresh temporary
    repository; the working tree is discarded when the call returns. A
    revision that cannot be fetched (unknown branch, tag or commit) falls back
    to the remote's default HEAD.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        *,
        timeout: float = GIT_NETWORK_TIMEOUT,
    ) -> None:
        """Initialize GitContentFetcher.

        Args:
            credentials: Consulted once per fetch call
            timeout: Seconds before a network operation is aborted
        """
        self._credentials = credentials
        self._timeout = timeout

    def _git(self, args: list[str], *, cwd: Path, context: str, env: dict[str, str]) -> str:
        result = run_subprocess_with_context(
            cmd=["git", *args],
            operation_context=context,
            cwd=cwd,
            timeout=self._timeout,
            env=env,
        )
        return result.stdout.strip()

    def _checkout(self, url: str, revision: str | None, workdir: Path) -> str:
        """Shallow-fetch a revision into workdir and check it out.

        Returns:
            The commit SHA that was checked out
        """
        env = git_auth_env(self._credentials.get_credentials(), copied_env_for_git_subprocess())
        try:
            self._git(["init", "--quiet"], cwd=workdir, context="initialize scratch repo", env=env)
            fetched = False
            if revision:
                try:
                    self._git(
                        ["fetch", "--quiet", "--depth", "1", "--no-tags", url, revision],
                        cwd=workdir,
                        context=f"fetch '{revision}' from {url}",
                        env=env,
                    )
                    fetched = True
                except RuntimeError as e:
                    logger.warning(
                        "Could not fetch revision %s from %s, using default branch: %s",
                        revision,
                        url,
                        e,
                    )
            if not fetched:
                self._git(
                    ["fetch", "--quiet", "--depth", "1", "--no-tags", url],
                    cwd=workdir,
                    context=f"fetch default branch from {url}",
                    env=env,
                )
            self._git(
                ["checkout", "--quiet", "--detach", "FETCH_HEAD"],
                cwd=workdir,
                context="check out fetched revision",
                env=env,
            )
            commit = self._git(
                ["rev-parse", "HEAD"], cwd=workdir, context="read fetched commit", env=env
            )
        except RuntimeError as e:
            raise SourceUnreachableError(url, str(e)) from e
        logger.debug("Fetched %s at %s", url, commit)
        return commit

    def fetch_file(self, source: Source, path: str, revision: str | None) -> FetchedFile:
        url = source.location
        with tempfile.TemporaryDirectory(prefix="arca-git-") as tmp:
            workdir = Path(tmp)
            commit = self._checkout(url, revision, workdir)
            file_path = resolve_inside(workdir, path)
            if file_path is None or not file_path.is_file():
                raise PathNotFoundError(path, commit)
            return FetchedFile(content=file_path.read_bytes(), revision_id=commit)

    def fetch_directory(
        self, source: Source, path: str, revision: str | None, destination: Path
    ) -> str:
        url = source.location
        with tempfile.TemporaryDirectory(prefix="arca-git-") as tmp:
            workdir = Path(tmp)
            commit = self._checkout(url, revision, workdir)
            dir_path = resolve_inside(workdir, path)
            if dir_path is None or not dir_path.is_dir():
                raise PathNotFoundError(path, commit)
            count = copy_directory_contents(dir_path, destination)
            logger.debug("Copied %d files from %s:%s", count, url, path)
            return commit
