"""Host adapters for the segmented editors."""
