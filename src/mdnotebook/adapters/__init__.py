"""Parser, serializer, storage and id adapters."""
