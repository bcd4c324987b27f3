"""Parser dei documenti FatturaPA."""
