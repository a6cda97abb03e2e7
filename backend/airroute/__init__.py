"""Multi-criteria clean-air routing over a small road network."""
