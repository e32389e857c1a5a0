"""Job-fit resume synthesis pipeline."""

__version__ = "0.1.0"
