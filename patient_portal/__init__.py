"""Patient Portal - client for the patient records API."""

__version__ = "1.0.0"
