"""Services for worktree-keeper: enrichment, removal and display."""
