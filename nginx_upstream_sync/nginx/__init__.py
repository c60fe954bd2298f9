"""nginx-side collaborators: template rendering, atomic publish, reload."""
