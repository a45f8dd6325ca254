"""Service layer — wiring between the upload pipeline, storage and access rules."""
