"""Core types: results, exit codes and configuration."""
