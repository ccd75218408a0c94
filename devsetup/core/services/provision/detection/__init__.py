"""L3 Detection — read-only probes: environment, presence, identity, versions."""
