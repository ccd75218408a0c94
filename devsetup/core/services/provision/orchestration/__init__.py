"""L5 Orchestration — the ordered setup run."""
