"""Pipeline features: resolution, metadata reading, diagnostics."""
