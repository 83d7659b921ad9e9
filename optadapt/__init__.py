"""optadapt: uniform adapter over options protocols (purchase, price, exercise, short)."""
