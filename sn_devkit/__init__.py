"""SN Devkit: ServiceNow development project tooling."""

__version__ = "0.1.0"
