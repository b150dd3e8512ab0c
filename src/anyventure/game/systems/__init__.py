"""Baseline snapshots, character builds and the overlay pipeline."""
