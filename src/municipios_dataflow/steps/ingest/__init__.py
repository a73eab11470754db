"""Steps de ingestão."""
