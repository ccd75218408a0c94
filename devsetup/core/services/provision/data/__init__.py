"""L0 Data — static tables: tool catalog, step order, shell profiles."""
