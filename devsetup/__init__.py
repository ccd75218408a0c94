"""devsetup — one-command macOS development workstation setup."""

__version__ = "0.1.0"
