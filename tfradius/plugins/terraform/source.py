"""
Module source acquisition.

A source is either a local directory or a Git URL in any of the forms
Terraform accepts (``git::https://...``, ``https://host/org/repo.git``,
``git@host:org/repo.git``), optionally with a ``//subdir`` and ``?ref=``.
Git sources are shallow-cloned into a temporary directory that is removed
when the context exits.
"""

import logging
import os
import re
import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from .exceptions import SourceAcquisitionError
from .inference import module_base_name

logger = logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT = 300

_REMOTE_PREFIXES = ("git::", "https://", "http://", "ssh://", "git@", "git://")
# `//` that separates the repository from a subdirectory, not the scheme one
_SUBDIR_RE = re.compile(r"(?<=[^:/])//")


@dataclass(frozen=True)
class ResolvedSource:
    """A module source available on the local filesystem."""

    path: Path
    origin: str
    name: str
    is_remote: bool = False


@dataclass(frozen=True)
class GitSource:
    """A Git URL split into repository, subdirectory and ref."""

    url: str
    subdir: str | None = None
    ref: str | None = None


def is_git_source(source: str) -> bool:
    """True when the source names a Git repository rather than a local path."""
    text = source.strip()
    if text.startswith(_REMOTE_PREFIXES):
        return True
    return text.split("?", 1)[0].endswith(".git") and not Path(text).exists()


def split_git_source(source: str) -> GitSource:
    """Split a Terraform-style Git source into its parts."""
    text = source.strip()
    if text.startswith("git::"):
        text = text[len("git::") :]

    ref = None
    if "?" in text:
        text, query = text.split("?", 1)
        for pair in query.split("&"):
            key, _, value = pair.partition("=")
            if key == "ref" and value:
                ref = value

    subdir = None
    match = _SUBDIR_RE.search(text)
    if match:
        subdir = text[match.end() :].strip("/") or None
        text = text[: match.start()]

    return GitSource(url=text, subdir=subdir, ref=ref)


class ModuleSourceResolver:
    """Makes a local path or Git URL available as a module directory."""

    def __init__(
        self,
        timeout_s: float = DEFAULT_GIT_TIMEOUT,
        token: str | None = None,
        git_executable: str = "git",
    ):
        """
        Initialize the resolver.

        Args:
            timeout_s: Timeout for the clone, in seconds
            token: Access token for HTTPS clones; never logged
            git_executable: Git binary to run
        """
        self._logger = logger.getChild(self.__class__.__name__)
        self.timeout_s = timeout_s
        self._token = token
        self.git_executable = git_executable

    @contextmanager
    def resolve(self, source: str, ref: str | None = None) -> Iterator[ResolvedSource]:
        """
        Yield the module directory for `source`.

        Args:
            source: Local path or Git URL
            ref: Branch or tag to check out; overrides a ``?ref=`` in the URL

        Raises:
            SourceAcquisitionError: If the path is missing or the clone fails
        """
        if not source or not source.strip():
            raise SourceAcquisitionError("Empty module source")

        if not is_git_source(source):
            yield self._resolve_local(source)
            return

        git_source = split_git_source(source)
        checkout_ref = ref or git_source.ref
        with tempfile.TemporaryDirectory(prefix="tfradius-") as tmp_dir:
            clone_dir = Path(tmp_dir) / "module"
            self._clone(git_source.url, clone_dir, checkout_ref)

            module_dir = clone_dir
            if git_source.subdir:
                module_dir = clone_dir / git_source.subdir
                if not module_dir.is_dir():
                    raise SourceAcquisitionError(
                        f"Subdirectory '{git_source.subdir}' not found in repository",
                        source=self._redact(source),
                    )

            origin = git_source.url
            if git_source.subdir:
                origin = f"{origin}//{git_source.subdir}"
            name = module_base_name(git_source.subdir or git_source.url)
            yield ResolvedSource(
                path=module_dir,
                origin=self._redact(origin),
                name=name,
                is_remote=True,
            )
        self._logger.debug(f"Removed temporary clone of {self._redact(source)}")

    def _resolve_local(self, source: str) -> ResolvedSource:
        path = Path(source).expanduser()
        if not path.exists():
            raise SourceAcquisitionError(
                f"Module path does not exist: {path}", source=source
            )
        resolved = path.resolve()
        module_dir = resolved if resolved.is_dir() else resolved.parent
        self._logger.info(f"Using local module at {resolved}")
        return ResolvedSource(path=resolved, origin=str(resolved), name=module_dir.name)

    def _clone(self, url: str, destination: Path, ref: str | None) -> None:
        cmd = [self.git_executable, "clone", "--depth", "1"]
        if ref:
            cmd.extend(["--branch", ref])
        cmd.extend([self._authenticated_url(url), str(destination)])

        safe_url = self._redact(url)
        self._logger.info(
            f"Cloning {safe_url}" + (f" at {ref}" if ref else "") + "..."
        )

        env = dict(os.environ)
        env["GIT_TERMINAL_PROMPT"] = "0"
        try:
            subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            self._logger.error(f"Clone of {safe_url} timed out after {self.timeout_s}s")
            raise SourceAcquisitionError(
                f"Timed out after {self.timeout_s}s cloning {safe_url}", source=safe_url
            ) from e
        except subprocess.CalledProcessError as e:
            stderr = self._redact(e.stderr or "").strip()
            self._logger.error(f"Clone failed with exit code {e.returncode}: {stderr}")
            raise SourceAcquisitionError(
                f"git clone failed ({e.returncode}): {stderr or 'no output'}",
                source=safe_url,
            ) from e
        except FileNotFoundError as e:
            raise SourceAcquisitionError(
                f"Git executable '{self.git_executable}' not found", source=safe_url
            ) from e

    def _authenticated_url(self, url: str) -> str:
        if self._token and url.startswith("https://") and "@" not in url:
            return url.replace("https://", f"https://x-access-token:{self._token}@", 1)
        return url

    def _redact(self, text: str) -> str:
        if self._token:
            text = text.replace(self._token, "***")
        return text
