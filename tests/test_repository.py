"""Tests for the git query port."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from worktree_keeper.exceptions import GitQueryError
from worktree_keeper.models import AheadBehind, DiffTotals
from worktree_keeper.services.git import GitRepository
from worktree_keeper.services.git.repository import parse_numstat


class TestParseNumstat:
    def test_sums_added_and_deleted(self):
        output = "10\t2\tsrc/a.py\n3\t0\tREADME.md\n"
        assert parse_numstat(output) == DiffTotals(added=13, deleted=2)

    def test_binary_files_are_skipped(self):
        output = "-\t-\timage.png\n4\t1\tnotes.txt"
        assert parse_numstat(output) == DiffTotals(added=4, deleted=1)

    def test_empty_output(self):
        assert parse_numstat("").is_empty


class TestRun:
    def test_failure_carries_exit_code_and_stderr(self, repo_port):
        with pytest.raises(GitQueryError) as exc_info:
            repo_port.run("rev-parse", "--verify", "no-such-ref")

        error = exc_info.value
        assert error.exit_code != 0
        assert error.git_args == ["rev-parse", "--verify", "no-such-ref"]
        assert "no-such-ref" in str(error)

    def test_returns_stdout(self, repo_port):
        assert repo_port.run("rev-parse", "--abbrev-ref", "HEAD").strip() == "main"


class TestQueries:
    def test_ahead_behind_counts_both_sides(self, git_repo, repo_port, commit_file):
        path = git_repo.working_dir
        git_repo.git.checkout('-b', 'feature')
        commit_file(path, "a.txt", "a\n")
        commit_file(path, "b.txt", "b\n")
        git_repo.git.checkout('main')
        commit_file(path, "c.txt", "c\n")

        assert repo_port.ahead_behind("main", "feature") == AheadBehind(ahead=2, behind=1)
        assert repo_port.ahead_behind("feature", "main") == AheadBehind(ahead=1, behind=2)

    def test_diff_stats_ignore_changes_on_base(self, git_repo, repo_port, commit_file):
        path = git_repo.working_dir
        git_repo.git.checkout('-b', 'feature')
        commit_file(path, "feature.txt", "one\ntwo\nthree\n")
        git_repo.git.checkout('main')
        commit_file(path, "main-only.txt", "x\n" * 20)

        assert repo_port.diff_stats("main", "feature") == DiffTotals(added=3, deleted=0)

    def test_working_tree_diff_stats(self, git_repo, repo_port):
        Path(git_repo.working_dir, "README.md").write_text("# Changed\nextra\n")

        assert repo_port.working_tree_diff_stats() == DiffTotals(added=2, deleted=1)

    def test_is_ancestor(self, git_repo, repo_port, commit_file):
        git_repo.git.branch('old')
        commit_file(git_repo.working_dir, "new.txt", "new\n")

        assert repo_port.is_ancestor("old", "main") is True
        assert repo_port.is_ancestor("main", "old") is False

    def test_is_ancestor_raises_for_unknown_ref(self, repo_port):
        with pytest.raises(GitQueryError):
            repo_port.is_ancestor("no-such-branch", "main")

    def test_merge_tree_returns_none_on_conflict(self, git_repo, repo_port, commit_file):
        path = git_repo.working_dir
        git_repo.git.checkout('-b', 'feature')
        commit_file(path, "README.md", "feature version\n")
        git_repo.git.checkout('main')
        commit_file(path, "README.md", "main version\n")

        assert repo_port.merge_tree("main", "feature") is None

    def test_merge_tree_clean_merge_returns_tree(self, git_repo, repo_port, commit_file):
        path = git_repo.working_dir
        git_repo.git.checkout('-b', 'feature')
        commit_file(path, "feature.txt", "feature\n")
        git_repo.git.checkout('main')

        assert repo_port.merge_tree("main", "feature") == repo_port.tree_id("feature")

    def test_upstream_branch_absent(self, repo_port):
        assert repo_port.upstream_branch("main") is None

    def test_commit_details(self, git_repo, repo_port, commit_file):
        commit_file(git_repo.working_dir, "x.txt", "x\n", "Add x\n\nLonger body")

        details = repo_port.commit_details("main")
        assert details.message == "Add x"
        assert details.timestamp > 0

    def test_branches(self, git_repo, repo_port):
        git_repo.git.branch('feature/one')

        assert sorted(repo_port.local_branches()) == ["feature/one", "main"]
        assert repo_port.branch_exists("feature/one") is True
        assert repo_port.branch_exists("missing") is False

    def test_worktree_root(self, repo_port, add_worktree):
        path = add_worktree("feature")

        assert os.path.realpath(repo_port.at(path).worktree_root()) == path

    def test_default_branch_falls_back_to_main(self, repo_port):
        assert repo_port.default_branch() == "main"

    def test_default_branch_master(self, git_repo, repo_port):
        git_repo.git.branch('-M', 'master')
        assert repo_port.default_branch() == "master"

    def test_worktree_state_detects_merge_in_progress(self, git_repo, repo_port):
        assert repo_port.worktree_state() is None
        Path(git_repo.git_dir, "MERGE_HEAD").write_text(git_repo.head.commit.hexsha + "\n")
        assert repo_port.worktree_state() == "merge"


class TestMutations:
    def test_delete_branch(self, git_repo, repo_port):
        git_repo.git.branch('gone')
        repo_port.delete_branch("gone", force=True)
        assert repo_port.branch_exists("gone") is False

    def test_spawn_background_chains_commands(self, repo_port):
        with patch("worktree_keeper.services.git.repository.Popen") as popen:
            popen.return_value.pid = 4242
            pid = repo_port.spawn_background([
                ["worktree", "remove", "/tmp/my worktree"],
                ["branch", "-D", "feature"],
            ])

        assert pid == 4242
        args, kwargs = popen.call_args
        shell, flag, script = args[0]
        assert (shell, flag) == ("sh", "-c")
        assert "worktree remove '/tmp/my worktree'" in script
        assert script.endswith("branch -D feature")
        assert " && " in script
        assert kwargs["start_new_session"] is True

    def test_at_returns_handle_for_other_path(self, repo_port):
        other = repo_port.at("/somewhere/else")
        assert isinstance(other, GitRepository)
        assert other.path == "/somewhere/else"
