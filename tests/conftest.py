"""Pytest fixtures for worktree-keeper tests"""
import os
import tempfile
from pathlib import Path

import pytest
import git

from worktree_keeper.services.git import GitRepository


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing (symlinks resolved)."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(os.path.realpath(tmpdir))


@pytest.fixture
def mock_config():
    """Create a configuration dictionary for foreground, sequential runs."""
    return {
        'verbose': False,
        'debug': False,
        'main_branch': None,
        'force': False,
        'force_delete': False,
        'delete_branch': True,
        'background': False,
        'sequential': True,
    }


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository on branch main with one commit."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    # Create initial commit on main branch
    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch('-M', 'main')

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def repo_port(git_repo):
    """GitRepository handle on the primary worktree."""
    return GitRepository(git_repo.working_dir)


@pytest.fixture
def commit_file():
    """Return a helper that writes a file in a checkout and commits it."""
    def _commit(path, filename, content, message=None):
        Path(path, filename).write_text(content)
        g = git.Git(str(path))
        g.add(filename)
        g.commit('-m', message or f"Update {filename}")
        return g.rev_parse('HEAD')

    return _commit


@pytest.fixture
def add_worktree(git_repo, temp_dir):
    """Return a helper that adds a worktree on a new branch and returns its path."""
    def _add(branch, start_point='main', detach=False):
        path = temp_dir / f"wt-{branch.replace('/', '-')}"
        if detach:
            git_repo.git.worktree('add', '--detach', str(path), start_point)
        else:
            git_repo.git.worktree('add', '-b', branch, str(path), start_point)
        return str(path)

    return _add

