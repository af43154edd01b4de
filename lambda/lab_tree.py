"""Builds the lab files tree of a repository.

The base path of a lab repository holds one directory per lab (sometimes the
markdown files sit directly under it). The tree is two levels deep: folders
named after the directories, each holding the markdown files found directly
inside, plus the markdown files found at the base path itself.
"""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from aws_lambda_powertools import Logger

from errors import ClientInputError, LabFilesError, UpstreamStatusError
from models import LabItem, RemoteEntry, is_lab_file, parse_entries

logger = Logger(child=True)

BASE_PATH = "Instructions/Labs"
MAX_WORKERS = 8


@dataclass(frozen=True)
class DirectoryFetch:
    """Outcome of listing one lab directory."""

    path: str
    items: List[LabItem] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fetch_directory(client, owner: str, repo_name: str, path: str) -> DirectoryFetch:
    """List the lab files directly inside ``path``.

    Never raises for remote failures: they are logged and returned as a failed
    ``DirectoryFetch`` so the caller can carry on with the other directories.
    """
    try:
        response = client.get_contents(owner, repo_name, path)
        if not response.ok:
            logger.error(
                f"GitHub API error (subdirectory): {response.status_code} - {response.body} for path: {path}",
                extra={"repository": repo_name, "path": path, "status_code": response.status_code},
            )
            return DirectoryFetch(path, error=f"status {response.status_code}")
        entries = parse_entries(response.body)
    except LabFilesError as e:
        logger.error(
            f"Error processing GitHub API request (subdirectory): {e} for path: {path}",
            extra={"repository": repo_name, "path": path},
        )
        return DirectoryFetch(path, error=str(e))

    return DirectoryFetch(path, items=[LabItem.leaf(entry) for entry in entries if is_lab_file(entry)])


def fetch_directories(client, owner, repo_name, directories: List[RemoteEntry], max_workers=MAX_WORKERS) -> List[DirectoryFetch]:
    """List every directory concurrently, results in the order of ``directories``."""
    if not directories:
        return []
    workers = min(max_workers, len(directories))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="labfiles") as executor:
        return list(executor.map(lambda entry: fetch_directory(client, owner, repo_name, entry.path), directories))


def build_lab_tree(client, owner: str, repo_name: Optional[str], base_path=BASE_PATH, max_workers=MAX_WORKERS) -> List[LabItem]:
    if not repo_name or not repo_name.strip():
        raise ClientInputError("Please provide a repository name in the route.")

    logger.info(f"Building lab files tree for repository: {repo_name}", extra={"repository": repo_name})

    response = client.get_contents(owner, repo_name, base_path)
    if not response.ok:
        logger.error(
            f"GitHub API error: {response.status_code} - {response.body}",
            extra={"repository": repo_name, "path": base_path, "status_code": response.status_code},
        )
        raise UpstreamStatusError(response.status_code, base_path)
    entries = parse_entries(response.body)

    directories = [entry for entry in entries if entry.is_dir]
    fetched = fetch_directories(client, owner, repo_name, directories, max_workers)
    pending = iter(fetched)

    # top-level lab files are added once, checked against the leaves already placed
    tree: List[LabItem] = []
    known_paths = set()
    for entry in entries:
        if entry.is_dir:
            children = next(pending).items
            if children:
                tree.append(LabItem.folder(entry, children))
                known_paths.update(child.path for child in children)
        elif is_lab_file(entry) and entry.path not in known_paths:
            tree.append(LabItem.leaf(entry))
            known_paths.add(entry.path)

    # Markdown files placed directly under the base path
    for entry in entries:
        if is_lab_file(entry) and entry.path not in known_paths:
            tree.append(LabItem.leaf(entry))
            known_paths.add(entry.path)

    failed = [result.path for result in fetched if not result.ok]
    logger.info(
        f"Built lab files tree for repository: {repo_name}",
        extra={"repository": repo_name, "items": len(tree), "failed_directories": failed},
    )
    return tree
