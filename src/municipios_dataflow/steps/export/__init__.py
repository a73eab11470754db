"""Steps de exportação."""
