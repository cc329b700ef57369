"""Command line interface for the Flotilla reconciler."""
