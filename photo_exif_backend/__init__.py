"""Photo EXIF inspector backend: locator resolution, validation, decoding and diagnostics."""
