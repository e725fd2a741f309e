"""Click commands for the refdocs CLI."""
