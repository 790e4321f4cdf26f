"""harmatch command-line interface."""
