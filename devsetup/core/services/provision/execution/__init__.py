"""L4 Execution — installer steps, startup-file writes, operator prompts."""
