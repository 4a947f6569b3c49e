"""Shared utilities for the PowerFlex CSI plugin."""
