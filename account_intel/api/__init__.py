"""HTTP surface for dossier generation."""
