"""Document model, codec and store."""
