"""Account intelligence pipeline for meeting dossiers."""
