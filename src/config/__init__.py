"""Settings and job file loading for planner-press."""
