"""Reading-log data pipeline for the portfolio bookshelf."""

__version__ = "0.1.0"
