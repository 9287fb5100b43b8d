"""Connection handling and action dispatch for control surfaces."""
