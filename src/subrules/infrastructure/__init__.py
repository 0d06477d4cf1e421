"""Infrastructure layer — version sources, rule appliers, and snapshot files."""
