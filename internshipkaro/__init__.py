"""InternshipKaro authentication and profile API."""
