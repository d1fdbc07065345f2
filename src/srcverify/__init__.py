"""srcverify - reconcile published gem artifacts against their tagged source."""

__version__ = "0.3.0"
