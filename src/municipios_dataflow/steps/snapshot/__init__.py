"""Steps de snapshot: aquisição e comparação."""
