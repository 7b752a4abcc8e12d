"""Shared plumbing: settings, logging, errors, events and filesystem helpers."""
