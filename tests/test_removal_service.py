"""Tests for safe worktree and branch removal."""

import os
import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from worktree_keeper.config import Config
from worktree_keeper.exceptions import GitQueryError, RemovalBlockedError
from worktree_keeper.models import (
    IntegrationResult,
    IntegrationStatus,
    RemovalState,
    StepOutcome,
)
from worktree_keeper.services.git import GitRepository, IntegrationClassifier
from worktree_keeper.services.removal_service import RemovalService


@pytest.fixture
def make_service(repo_port, mock_config, git_repo):
    """Return a factory for a foreground RemovalService with config overrides."""
    def _make(cwd=None, **overrides):
        config = Config.from_dict({**mock_config, **overrides})
        return RemovalService(repo_port, config, cwd=cwd or git_repo.working_dir)

    return _make


def _remove_one(service, target):
    results = service.remove([target])
    assert len(results) == 1
    return results[0]


class TestGuards:
    def test_primary_worktree_is_blocked(self, make_service):
        result = _remove_one(make_service(), "main")

        assert result.state == RemovalState.BLOCKED
        assert "primary worktree" in result.error
        assert result.exit_code == 1

    def test_primary_worktree_is_blocked_on_any_branch(self, git_repo, repo_port, make_service):
        git_repo.git.checkout('-b', 'topic')

        result = _remove_one(make_service(force=True, force_delete=True), "topic")

        assert result.state == RemovalState.BLOCKED
        assert repo_port.branch_exists("topic")

    def test_dirty_worktree_is_blocked(self, repo_port, add_worktree, make_service):
        path = add_worktree("feature")
        Path(path, "scratch.txt").write_text("wip\n")

        result = _remove_one(make_service(), "feature")

        assert result.state == RemovalState.BLOCKED
        assert "uncommitted changes" in result.error
        assert os.path.isdir(path)
        assert repo_port.branch_exists("feature")

    def test_force_removes_dirty_worktree(self, repo_port, add_worktree, make_service):
        path = add_worktree("feature")
        Path(path, "README.md").write_text("edited\n")

        result = _remove_one(make_service(force=True), "feature")

        assert result.state == RemovalState.REMOVED
        assert not os.path.exists(path)
        assert not repo_port.branch_exists("feature")

    def test_check_guards_raises_blocked_error(self, add_worktree, make_service):
        service = make_service()
        primary = service.worktree_service.list_worktrees()[0]
        target = service.select(primary.branch, [primary])

        with pytest.raises(RemovalBlockedError) as exc_info:
            service.check_guards(target)
        assert exc_info.value.reason == RemovalBlockedError.PRIMARY_WORKTREE


class TestForegroundRemoval:
    def test_integrated_branch_is_deleted(self, repo_port, add_worktree, make_service):
        path = add_worktree("feature")

        result = _remove_one(make_service(), "feature")

        assert result.state == RemovalState.REMOVED
        assert result.worktree_result.outcome == StepOutcome.DONE
        assert result.branch_result.outcome == StepOutcome.DONE
        assert result.integration.status == IntegrationStatus.ANCESTOR
        assert result.base == "main"
        assert result.exit_code == 0
        assert not os.path.exists(path)
        assert not repo_port.branch_exists("feature")

    def test_squash_merged_branch_is_deleted(
        self, git_repo, repo_port, add_worktree, commit_file, make_service
    ):
        path = add_worktree("feature")
        commit_file(path, "feature.txt", "feature\n")
        git_repo.git.merge('--squash', 'feature')
        git_repo.git.commit('-m', 'Squash feature')
        commit_file(git_repo.working_dir, "later.txt", "later\n")

        result = _remove_one(make_service(), "feature")

        assert result.integration.status == IntegrationStatus.MERGE_NOOP
        assert result.branch_result.outcome == StepOutcome.DONE
        assert not repo_port.branch_exists("feature")

    def test_not_integrated_branch_is_kept(self, repo_port, add_worktree, commit_file, make_service):
        path = add_worktree("feature")
        commit_file(path, "feature.txt", "unmerged\n")

        result = _remove_one(make_service(), "feature")

        assert result.worktree_result.outcome == StepOutcome.DONE
        assert result.branch_result.outcome == StepOutcome.NOT_INTEGRATED
        assert result.state == RemovalState.REMOVED
        assert result.exit_code == 0
        assert not result.is_partial_failure
        assert not os.path.exists(path)
        assert repo_port.branch_exists("feature")

    def test_force_delete_skips_classification(
        self, repo_port, add_worktree, commit_file, make_service
    ):
        path = add_worktree("feature")
        commit_file(path, "feature.txt", "unmerged\n")

        with patch.object(IntegrationClassifier, "classify") as classify:
            result = _remove_one(make_service(force_delete=True), "feature")

        classify.assert_not_called()
        assert result.integration is None
        assert result.branch_result.outcome == StepOutcome.DONE
        assert not repo_port.branch_exists("feature")

    def test_keep_branch(self, repo_port, add_worktree, make_service):
        add_worktree("feature")

        result = _remove_one(make_service(delete_branch=False), "feature")

        assert result.worktree_result.outcome == StepOutcome.DONE
        assert result.branch_result.outcome == StepOutcome.SKIPPED
        assert repo_port.branch_exists("feature")

    def test_detached_worktree_has_no_branch_step(self, add_worktree, make_service):
        path = add_worktree("scratch", detach=True)

        result = _remove_one(make_service(), path)

        assert result.branch is None
        assert result.worktree_result.outcome == StepOutcome.DONE
        assert result.branch_result.outcome == StepOutcome.NOT_APPLICABLE
        assert result.state == RemovalState.REMOVED

    def test_unknown_integration_keeps_branch_and_fails(self, repo_port, add_worktree, make_service):
        add_worktree("feature")
        unknown = IntegrationResult("feature", "main", IntegrationStatus.UNKNOWN, diagnostic="boom")

        with patch.object(IntegrationClassifier, "classify", return_value=unknown):
            result = _remove_one(make_service(), "feature")

        assert result.worktree_result.outcome == StepOutcome.DONE
        assert result.branch_result.outcome == StepOutcome.FAILED
        assert "boom" in result.branch_result.message
        assert result.is_partial_failure
        assert result.exit_code == 1
        assert repo_port.branch_exists("feature")

    def test_branch_deletion_failure_keeps_worktree_removal(
        self, add_worktree, make_service
    ):
        path = add_worktree("feature")
        error = GitQueryError(["branch", "-D", "feature"], 1, "error: cannot lock ref")

        with patch.object(GitRepository, "delete_branch", side_effect=error):
            result = _remove_one(make_service(), "feature")

        assert result.worktree_result.outcome == StepOutcome.DONE
        assert result.branch_result.outcome == StepOutcome.FAILED
        assert result.state == RemovalState.FAILED
        assert result.is_partial_failure
        assert not os.path.exists(path)

    def test_worktree_removal_failure_skips_branch(self, repo_port, add_worktree, make_service):
        add_worktree("feature")
        error = GitQueryError(["worktree", "remove"], 128, "fatal: locked")

        with patch.object(GitRepository, "remove_worktree", side_effect=error):
            result = _remove_one(make_service(), "feature")

        assert result.worktree_result.outcome == StepOutcome.FAILED
        assert result.branch_result.outcome == StepOutcome.SKIPPED
        assert result.state == RemovalState.FAILED
        assert repo_port.branch_exists("feature")

    def test_orphaned_worktree_is_pruned(self, repo_port, add_worktree, make_service):
        path = add_worktree("feature")
        shutil.rmtree(path)

        result = _remove_one(make_service(), "feature")

        assert result.worktree_result.outcome == StepOutcome.DONE
        assert result.branch_result.outcome == StepOutcome.DONE
        assert not repo_port.branch_exists("feature")
        assert "feature" not in repo_port.worktree_list_porcelain()

    def test_branch_without_worktree(self, git_repo, repo_port, make_service):
        git_repo.git.branch('old')

        result = _remove_one(make_service(), "old")

        assert result.worktree is None
        assert result.worktree_result.outcome == StepOutcome.NOT_APPLICABLE
        assert result.branch_result.outcome == StepOutcome.DONE
        assert not repo_port.branch_exists("old")


class TestTargetSelection:
    def test_current_worktree(self, add_worktree, make_service):
        path = add_worktree("feature")

        results = make_service(cwd=path).remove([])

        assert [r.target for r in results] == ["@"]
        assert results[0].branch == "feature"
        assert results[0].state == RemovalState.REMOVED
        assert not os.path.exists(path)

    def test_relative_path(self, temp_dir, add_worktree, make_service):
        path = add_worktree("feature")

        result = _remove_one(make_service(cwd=str(temp_dir)), "wt-feature")

        assert result.worktree.path == path
        assert not os.path.exists(path)

    def test_unknown_target_fails(self, make_service):
        result = _remove_one(make_service(), "does-not-exist")

        assert result.state == RemovalState.FAILED
        assert "No worktree or branch found" in result.error
        assert result.exit_code == 1

    def test_ambiguous_target(self, git_repo, temp_dir, add_worktree, make_service):
        add_worktree("b")
        # A worktree on another branch whose directory is literally named "b"
        git_repo.git.worktree('add', '-b', 'other', str(temp_dir / "b"), 'main')

        result = _remove_one(make_service(cwd=str(temp_dir)), "b")

        assert result.state == RemovalState.FAILED
        assert "ambiguous" in result.error
        assert os.path.isdir(temp_dir / "b")
        assert os.path.isdir(temp_dir / "wt-b")

    def test_multiple_targets_are_independent(self, repo_port, add_worktree, make_service):
        first = add_worktree("first")
        second = add_worktree("second")

        results = make_service().remove(["first", "missing", "main", "second"])

        assert [r.target for r in results] == ["first", "missing", "main", "second"]
        assert [r.state for r in results] == [
            RemovalState.REMOVED,
            RemovalState.FAILED,
            RemovalState.BLOCKED,
            RemovalState.REMOVED,
        ]
        assert not os.path.exists(first)
        assert not os.path.exists(second)

    def test_removing_current_worktree_first_keeps_later_targets_working(
        self, mock_config, repo_port, add_worktree
    ):
        paths = [add_worktree(name) for name in ("feature-a", "feature-b", "feature-c")]
        # Bound to the current worktree, as the CLI does
        service = RemovalService(
            GitRepository(paths[0]), Config.from_dict(mock_config), cwd=paths[0]
        )

        results = service.remove(["feature-a", "feature-b", "feature-c"])

        assert [r.state for r in results] == [RemovalState.REMOVED] * 3
        assert not any(os.path.exists(p) for p in paths)
        for branch in ("feature-a", "feature-b", "feature-c"):
            assert not repo_port.branch_exists(branch)

    def test_current_worktree_alongside_other_targets(
        self, mock_config, repo_port, add_worktree
    ):
        current = add_worktree("current")
        other = add_worktree("other")
        service = RemovalService(
            GitRepository(current), Config.from_dict(mock_config), cwd=current
        )

        results = service.remove(["@", "other"])

        assert [r.state for r in results] == [RemovalState.REMOVED, RemovalState.REMOVED]
        assert results[0].branch == "current"
        assert not os.path.exists(current)
        assert not os.path.exists(other)


class TestBackgroundRemoval:
    def test_spawns_detached_process(self, add_worktree, make_service):
        path = add_worktree("feature")

        with patch("worktree_keeper.services.git.repository.Popen") as popen:
            popen.return_value.pid = 1234
            result = _remove_one(make_service(background=True), "feature")

        assert result.worktree_result.outcome == StepOutcome.SCHEDULED
        assert result.branch_result.outcome == StepOutcome.SCHEDULED
        assert result.state == RemovalState.REMOVED
        assert result.exit_code == 0

        script = popen.call_args[0][0][2]
        assert f"worktree remove {path}" in script
        assert "branch -D feature" in script
        assert popen.call_args[1]["start_new_session"] is True
        # Nothing was removed in-process
        assert os.path.isdir(path)

    def test_not_integrated_branch_is_not_scheduled(
        self, add_worktree, commit_file, make_service
    ):
        path = add_worktree("feature")
        commit_file(path, "feature.txt", "unmerged\n")

        with patch("worktree_keeper.services.git.repository.Popen") as popen:
            result = _remove_one(make_service(background=True), "feature")

        assert result.worktree_result.outcome == StepOutcome.SCHEDULED
        assert result.branch_result.outcome == StepOutcome.NOT_INTEGRATED
        assert "branch -D" not in popen.call_args[0][0][2]

    def test_spawn_failure_is_reported(self, add_worktree, make_service):
        add_worktree("feature")

        with patch(
            "worktree_keeper.services.git.repository.Popen",
            side_effect=OSError("no shell"),
        ):
            result = _remove_one(make_service(background=True), "feature")

        assert result.worktree_result.outcome == StepOutcome.FAILED
        assert result.state == RemovalState.FAILED
        assert result.exit_code == 1

    def test_branch_only_target_runs_in_foreground(self, git_repo, repo_port, make_service):
        git_repo.git.branch('old')

        with patch("worktree_keeper.services.git.repository.Popen") as popen:
            result = _remove_one(make_service(background=True), "old")

        popen.assert_not_called()
        assert result.branch_result.outcome == StepOutcome.DONE
        assert not repo_port.branch_exists("old")
