"""SmartDictation - continuous clinical dictation capture and section reconciliation."""

__version__ = "0.1.0"
