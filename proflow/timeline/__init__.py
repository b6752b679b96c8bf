"""Schedule arithmetic, status classification and order grouping."""
