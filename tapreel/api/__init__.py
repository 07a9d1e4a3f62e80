"""REST surface for mapping management and reader control."""
