"""Shared HTTP, logging, and configuration helpers for searchjobs packages."""
