"""HTTP service mode for pomgen."""
