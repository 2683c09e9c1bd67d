"""Lead-centric Gmail inbox for the RemoAsset CRM."""

__version__ = "0.1.0"
