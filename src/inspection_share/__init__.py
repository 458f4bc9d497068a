"""Share links for property inspections."""
