"""Board and storage collaborators for the Planka agent."""
