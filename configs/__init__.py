"""Experiment and grammar configurations."""
