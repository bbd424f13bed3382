"""Test package for the TypeScript client generator."""
