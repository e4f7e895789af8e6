"""terrafirm: environment/configuration wrapper around terraform."""
